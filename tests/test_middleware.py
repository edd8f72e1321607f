"""Tests de l'observation des réponses d'upload."""

from django.http import HttpResponse, StreamingHttpResponse
from django.test import RequestFactory, override_settings

from uploads.middleware import UploadResponseTapMiddleware

seen = []


def record(request, content):
    seen.append(content)


def broken(request, content):
    raise RuntimeError("observateur en panne")


def upload_request():
    return RequestFactory().post("/wp-admin/admin-ajax.php", {"action": "fluentform_file_upload", "form_id": "3"})


class TestUploadResponseTap:
    """Tests de UploadResponseTapMiddleware."""

    def setup_method(self) -> None:
        seen.clear()

    @override_settings(PRIVATE_UPLOADS_RESPONSE_OBSERVER="tests.test_middleware.record")
    def test_observer_receives_body_unchanged(self) -> None:
        response = HttpResponse(b'{"data":{"files":[]}}')
        middleware = UploadResponseTapMiddleware(lambda request: response)

        assert middleware(upload_request()) is response
        assert response.content == b'{"data":{"files":[]}}'
        assert seen == [b'{"data":{"files":[]}}']

    @override_settings(PRIVATE_UPLOADS_RESPONSE_OBSERVER=record)
    def test_other_actions_are_ignored(self) -> None:
        middleware = UploadResponseTapMiddleware(lambda request: HttpResponse(b"ok"))
        middleware(RequestFactory().get("/", {"action": "autre"}))
        assert seen == []

    @override_settings(PRIVATE_UPLOADS_RESPONSE_OBSERVER=record)
    def test_streaming_responses_are_not_consumed(self) -> None:
        response = StreamingHttpResponse(iter([b"a", b"b"]))
        middleware = UploadResponseTapMiddleware(lambda request: response)
        assert middleware(upload_request()) is response
        assert seen == []

    @override_settings(PRIVATE_UPLOADS_RESPONSE_OBSERVER=broken)
    def test_observer_failure_keeps_response(self) -> None:
        response = HttpResponse(b"ok")
        middleware = UploadResponseTapMiddleware(lambda request: response)
        assert middleware(upload_request()) is response

    @override_settings(PRIVATE_UPLOADS_RESPONSE_OBSERVER=None, PRIVATE_UPLOADS_DEBUG=False)
    def test_disabled_without_observer_or_debug(self) -> None:
        middleware = UploadResponseTapMiddleware(lambda request: HttpResponse(b"ok"))
        assert middleware.observer is None
