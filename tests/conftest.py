"""Configuration Django minimale pour les tests (aucune base de données)."""

import tempfile
from pathlib import Path
from types import SimpleNamespace

import django
import pytest
from django.conf import settings

from uploads.rewriter import ReferenceRewriter
from uploads.storages import PrivateStore

PUBLIC_URL = "https://site.example/wp-content/uploads/fluentform/"


def pytest_configure():
    if settings.configured:
        return
    scratch = Path(tempfile.mkdtemp(prefix="uploadhub-tests-"))
    settings.configure(
        SECRET_KEY="test-secret",
        INSTALLED_APPS=[
            "django.contrib.auth",
            "django.contrib.contenttypes",
            "uploads.apps.UploadsConfig",
        ],
        ROOT_URLCONF="uploadhub.urls",
        TEMPLATES=[{"BACKEND": "django.template.backends.django.DjangoTemplates", "APP_DIRS": True}],
        USE_TZ=True,
        PRIVATE_UPLOADS_ROOT=str(scratch / "private"),
        PRIVATE_UPLOADS_PUBLIC_ROOT=str(scratch / "public" / "fluentform"),
        PRIVATE_UPLOADS_PUBLIC_URL=PUBLIC_URL,
    )
    django.setup()


@pytest.fixture
def private_root(tmp_path: Path) -> Path:
    return tmp_path / "private"


@pytest.fixture
def public_root(tmp_path: Path) -> Path:
    root = tmp_path / "wp-content" / "uploads" / "fluentform"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def store(private_root: Path) -> PrivateStore:
    s = PrivateStore(location=str(private_root))
    s.ensure_base_dir()
    return s


@pytest.fixture
def rewriter(store: PrivateStore, public_root: Path) -> ReferenceRewriter:
    return ReferenceRewriter(store=store, public_root=public_root, public_url=PUBLIC_URL)


@pytest.fixture
def admin():
    return SimpleNamespace(username="admin", is_authenticated=True, is_active=True, is_superuser=True, is_staff=True)


@pytest.fixture
def staff():
    return SimpleNamespace(username="staff", is_authenticated=True, is_active=True, is_superuser=False, is_staff=True)


def make_file(root: Path, relative: str, content: bytes = b"%PDF-1.4 test") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path
