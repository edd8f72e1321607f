import json

from django.core.management.base import BaseCommand, CommandError

from uploads.rewriter import ReferenceRewriter
from uploads.storages import is_reference


def _leaves(payload):
    if isinstance(payload, dict):
        for value in payload.values():
            yield from _leaves(value)
    elif isinstance(payload, (list, tuple)):
        for value in payload:
            yield from _leaves(value)
    elif isinstance(payload, str):
        yield payload


class Command(BaseCommand):
    help = "Déplace vers le stockage privé les fichiers référencés par des soumissions JSON et réécrit leurs URL."

    def add_arguments(self, parser):
        parser.add_argument('payloads', nargs='+', help="Fichiers JSON de soumissions à retraiter")
        parser.add_argument('--dry-run', action='store_true', help="Liste les fichiers concernés sans rien déplacer")

    def handle(self, payloads, dry_run=False, **options):
        rewriter = ReferenceRewriter()
        changed = 0
        for name in payloads:
            try:
                with open(name, encoding='utf-8') as f:
                    payload = json.load(f)
            except (OSError, ValueError) as e:
                raise CommandError(f"Lecture impossible de '{name}' : {e}")

            if dry_run:
                for value in _leaves(payload):
                    relative = "" if is_reference(value) else rewriter.extract_relative(value)
                    if relative:
                        self.stdout.write(f"{name} : {relative}")
                continue

            rewritten = rewriter.rewrite(payload)
            if rewritten == payload:
                self.stdout.write(f"{name} : rien à faire")
                continue
            with open(name, 'w', encoding='utf-8') as f:
                json.dump(rewritten, f, ensure_ascii=False, indent=2)
            changed += 1
            self.stdout.write(f"{name} : réécrit")

        self.stdout.write(self.style.SUCCESS(f"{changed} soumission(s) réécrite(s)."))
