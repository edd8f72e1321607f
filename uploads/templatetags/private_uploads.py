from django import template

from ..links import render_links

register = template.Library()

FALSE_STRINGS = ("", "0", "false", "no", "non", "off")


@register.filter
def private_links(value, display=True):
    # {{ submission.fichiers|private_links }} -> <ul> de liens admin, ou ""
    # {{ submission.fichiers|private_links:"False" }} -> valeurs brutes
    if isinstance(display, str):
        display = display.strip().lower() not in FALSE_STRINGS
    return render_links(value, display=bool(display))
