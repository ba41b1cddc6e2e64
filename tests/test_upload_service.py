import io

import pytest
from PIL import Image

from myclinics.application.services.upload_service import UploadService, UploadedFile
from myclinics.exceptions import APIException
from myclinics import messages

from .fakes import FakeStorage


def png_bytes(size=(600, 400), mode="RGBA"):
    buf = io.BytesIO()
    Image.new(mode, size, (10, 120, 200, 255) if mode == "RGBA" else (10, 120, 200)).save(buf, format="PNG")
    return buf.getvalue()


def make_service(**kwargs):
    return UploadService(FakeStorage(), **kwargs)


def test_save_image_stores_file():
    svc = make_service()
    url = svc.save_image("doctors", UploadedFile("me.png", "image/png", png_bytes()))
    assert url.startswith("/uploads/doctors/")
    assert len(svc.storage.files) == 1


def test_save_images_adds_thumbnails():
    svc = make_service()
    uploads = [UploadedFile(f"c{i}.png", "image/png", png_bytes()) for i in range(2)]
    urls = svc.save_images("clinics", uploads, limit=5)
    assert len(urls) == 2
    thumbs = [u for u in svc.storage.files if "thumbnails" in u]
    assert len(thumbs) == 2
    with Image.open(io.BytesIO(svc.storage.files[thumbs[0]])) as img:
        assert img.format == "JPEG"
        assert max(img.size) <= 300


def test_save_images_enforces_limit():
    svc = make_service()
    uploads = [UploadedFile("c.png", "image/png", png_bytes())] * 3
    with pytest.raises(APIException) as exc:
        svc.save_images("clinics", uploads, limit=2)
    assert exc.value.status_code == 400
    assert svc.storage.files == {}


def test_rejects_wrong_type_fake_image_and_oversize():
    svc = make_service(max_file_size=1024)
    with pytest.raises(APIException) as exc:
        svc.save_image("doctors", UploadedFile("a.gif", "image/gif", b"GIF89a"))
    assert exc.value.status_code == 415
    with pytest.raises(APIException) as exc:
        svc.save_image("doctors", UploadedFile("a.png", "image/png", b"not really a png"))
    assert exc.value.status_code == 400
    with pytest.raises(APIException) as exc:
        svc.save_image("doctors", UploadedFile("a.png", "image/png", b"x" * 2048))
    assert exc.value.status_code == 413
    with pytest.raises(APIException) as exc:
        svc.save_image("doctors", UploadedFile("a.png", "image/png", b""))
    assert exc.value.status_code == 400


def test_save_report_checks_pdf_signature():
    svc = make_service()
    url = svc.save_report(UploadedFile("r.pdf", "application/pdf", b"%PDF-1.4\n..."))
    assert url.startswith("/uploads/reports/")
    with pytest.raises(APIException):
        svc.save_report(UploadedFile("r.pdf", "application/pdf", b"<html>"))
    assert svc.save_report(UploadedFile("scan.png", "image/png", png_bytes(mode="RGB")))


def test_discard_removes_files():
    svc = make_service()
    url = svc.save_report(UploadedFile("r.pdf", "application/pdf", b"%PDF-1.7"))
    svc.discard([url])
    assert svc.storage.files == {}


def test_oversized_pixel_count_is_rejected(monkeypatch):
    # Pillow refuses images above twice MAX_IMAGE_PIXELS
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    svc = make_service()
    bomb = png_bytes(size=(64, 64), mode="RGB")
    with pytest.raises(APIException) as exc:
        svc.save_image("doctors", UploadedFile("big.png", "image/png", bomb))
    assert exc.value.status_code == 400
    assert exc.value.detail == messages.FILE_INVALID
    with pytest.raises(APIException):
        svc.save_report(UploadedFile("big.png", "image/png", bomb))
    assert svc.storage.files == {}
