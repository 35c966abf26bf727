import io

import pytest
from botocore.exceptions import ClientError
from werkzeug.datastructures import FileStorage

from utils.exceptions import UploadError
from utils.media import S3MediaUploader


class RecordingClient:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.error:
            raise self.error
        self.calls.append((fileobj.read(), bucket, key, ExtraArgs))


def _file(name="me.PNG", body=b"img", mimetype="image/png"):
    return FileStorage(stream=io.BytesIO(body), filename=name, content_type=mimetype)


def test_upload_returns_public_url():
    client = RecordingClient()
    uploader = S3MediaUploader("bucket", base_url="https://cdn.test/", prefix="media", client=client)

    url = uploader.upload(_file(), "avatars")

    body, bucket, key, extra = client.calls[0]
    assert body == b"img"
    assert bucket == "bucket"
    assert key.startswith("media/avatars/") and key.endswith(".png")
    assert extra == {"ContentType": "image/png"}
    assert url == f"https://cdn.test/{key}"


def test_default_base_url_points_at_bucket():
    uploader = S3MediaUploader("bucket", client=RecordingClient())
    assert uploader.base_url == "https://bucket.s3.amazonaws.com"


def test_upload_rejects_non_images():
    uploader = S3MediaUploader("bucket", client=RecordingClient())
    with pytest.raises(UploadError, match="Unsupported file type"):
        uploader.upload(_file(name="notes.txt", mimetype="text/plain"), "avatars")


def test_upload_wraps_s3_errors():
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    uploader = S3MediaUploader("bucket", client=RecordingClient(error=error))
    with pytest.raises(UploadError, match="Error while uploading avatars"):
        uploader.upload(_file(), "avatars")
