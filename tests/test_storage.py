"""Tests for proof file storage."""

from unittest.mock import patch

import pytest

from resolveit.core.storage import FileStore


@pytest.mark.asyncio
async def test_local_store_keeps_order_and_extension(file_store):
    refs = await file_store.save_many([(b"a", "First.PDF"), (b"b", "second.png"), (b"c", "noext")])

    assert [r.rsplit("/", 1)[-1].split("-")[0].isdigit() for r in refs] == [True] * 3
    assert refs[0].endswith(".pdf")
    assert refs[1].endswith(".png")
    assert "." not in refs[2].rsplit("/", 1)[-1]
    assert (file_store.upload_dir / refs[1].rsplit("/", 1)[-1]).read_bytes() == b"b"


@pytest.mark.asyncio
async def test_cloudinary_backend_returns_url(tmp_path):
    store = FileStore(upload_dir=tmp_path, backend="cloudinary")
    result = {
        "secure_url": "https://res.cloudinary.com/demo/raw/upload/proof.pdf",
        "public_id": "resolveit/proof/proof",
        "resource_type": "raw",
        "bytes": 3,
    }
    with patch("resolveit.core.storage.cloudinary.uploader.upload", return_value=result) as upload:
        ref = await store.save(b"pdf", "proof.pdf")

    assert ref == result["secure_url"]
    assert upload.call_args.kwargs["resource_type"] == "raw"
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_cloudinary_failure_falls_back_to_disk(tmp_path):
    store = FileStore(upload_dir=tmp_path, backend="cloudinary")
    with patch(
        "resolveit.core.storage.cloudinary.uploader.upload",
        side_effect=RuntimeError("offline"),
    ):
        ref = await store.save(b"img", "photo.jpg")

    assert ref.startswith(tmp_path.as_posix())
    assert len(list(tmp_path.iterdir())) == 1
