"""Unit tests for the S3 upload utilities and the S3Singleton."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from branchdeploy.core import sync
from branchdeploy.core.S3Singleton import S3Singleton
from branchdeploy.core.models import Credentials, UploadSpec
from branchdeploy.utils import s3_utils


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "css").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "index.html").write_text("<h1>hi</h1>")
    (root / "about").write_text("<p>about</p>")
    (root / "css" / "main.css").write_text("body {}")
    (root / ".git" / "HEAD").write_text("ref: refs/heads/master")
    return root


@pytest.fixture
def spec(site):
    return UploadSpec(local_dir=site, bucket="bucket", key_prefix="v1/owner/repo/site", file_params=sync.file_params)


@pytest.fixture(autouse=True)
def reset_singleton():
    S3Singleton.reset()
    yield
    S3Singleton.reset()


class TestS3Singleton:
    @patch("branchdeploy.core.S3Singleton.boto3")
    def test_client_created_once_per_credentials(self, mock_boto3):
        credentials = Credentials("key", "secret")

        first = S3Singleton(credentials, "eu-west-1")
        second = S3Singleton()
        third = S3Singleton(credentials, "eu-west-1")

        assert first is second is third
        mock_boto3.client.assert_called_once()
        _, kwargs = mock_boto3.client.call_args
        assert kwargs["aws_access_key_id"] == "key"
        assert kwargs["aws_secret_access_key"] == "secret"
        assert kwargs["region_name"] == "eu-west-1"
        assert kwargs["config"].max_pool_connections == 20

    @patch("branchdeploy.core.S3Singleton.boto3")
    def test_new_credentials_replace_client(self, mock_boto3):
        first = S3Singleton(Credentials("a", "b"))
        second = S3Singleton(Credentials("c", "d"))
        assert first is not second
        assert mock_boto3.client.call_count == 2

    def test_requires_credentials_first(self):
        with pytest.raises(RuntimeError):
            S3Singleton()

    @patch("branchdeploy.core.S3Singleton.boto3")
    def test_upload_file_passes_extra_args(self, mock_boto3):
        s3 = S3Singleton(Credentials("key", "secret"))
        s3.upload_file(Path("/tmp/a.js"), "bucket", "v1/a.js", extra_args={"CacheControl": "max-age=60"})

        mock_boto3.client.return_value.upload_file.assert_called_once_with(
            "/tmp/a.js",
            "bucket",
            "v1/a.js",
            ExtraArgs={"CacheControl": "max-age=60"},
            Callback=None,
            Config=S3Singleton._transfer_config,
        )


class TestObjectHelpers:
    def test_object_key(self):
        assert s3_utils.object_key("v1/owner/repo/", Path("index.html")) == "v1/owner/repo/index.html"
        assert s3_utils.object_key("v1/owner/repo/site", Path("css/main.css")) == "v1/owner/repo/site/css/main.css"

    def test_object_params_guesses_content_type(self):
        params = s3_utils.object_params(Path("app.js"), sync.file_params)
        assert params["ContentType"] in ("application/javascript", "text/javascript")
        assert params["CacheControl"] == "max-age=60"

    def test_object_params_keeps_rule_content_type(self):
        params = s3_utils.object_params(Path("about"), sync.file_params)
        assert params["ContentType"] == "text/html"

    def test_list_directory_files_skips_git(self, site):
        files = [path.relative_to(site).as_posix() for path in s3_utils.list_directory_files(site)]
        assert files == ["about", "index.html", "css/main.css"]


class TestUploadDirectory:
    @patch("branchdeploy.utils.s3_utils.upload_file")
    def test_uploads_every_file(self, mock_upload, spec):
        mock_upload.side_effect = lambda path, bucket, key, **kwargs: f"{bucket}/{key}"

        uploaded = s3_utils.upload_directory(spec, max_workers=1)

        assert uploaded == [
            "bucket/v1/owner/repo/site/about",
            "bucket/v1/owner/repo/site/css/main.css",
            "bucket/v1/owner/repo/site/index.html",
        ]
        extra_args = {call.args[2]: call.kwargs["extra_args"] for call in mock_upload.call_args_list}
        assert extra_args["v1/owner/repo/site/about"]["ContentType"] == "text/html"
        assert extra_args["v1/owner/repo/site/css/main.css"]["ContentType"] == "text/css"
        assert all(args["CacheControl"] == "max-age=60" for args in extra_args.values())

    @patch("branchdeploy.utils.s3_utils.upload_file")
    def test_failure_is_raised(self, mock_upload, spec):
        mock_upload.side_effect = OSError("access denied")
        with pytest.raises(OSError, match="access denied"):
            s3_utils.upload_directory(spec, max_workers=1)

    def test_missing_directory(self, tmp_path):
        spec = UploadSpec(tmp_path / "missing", "bucket", "v1/", sync.file_params)
        with pytest.raises(FileNotFoundError):
            s3_utils.upload_directory(spec)

    @patch("branchdeploy.core.S3Singleton.boto3")
    def test_uses_shared_client(self, mock_boto3, spec):
        S3Singleton(Credentials("key", "secret"))
        client = mock_boto3.client.return_value

        s3_utils.upload_directory(spec, max_workers=2)

        keys = sorted(call.args[2] for call in client.upload_file.call_args_list)
        assert keys == [
            "v1/owner/repo/site/about",
            "v1/owner/repo/site/css/main.css",
            "v1/owner/repo/site/index.html",
        ]
