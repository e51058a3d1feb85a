"""
Unit tests for source key validation and download.
"""

import pytest
from botocore.exceptions import ClientError

from frame_extract.exceptions import FetchError, InvalidKeyError, UnsupportedTypeError
from frame_extract.fetcher import fetch_source, source_filename, validate_source
from frame_extract.models import ALLOWED_TYPES, SourceReference
from tests.helpers import VIDEO_BYTES


@pytest.mark.unit
class TestValidateSource:
    """Test cases for validate_source."""

    @pytest.mark.parametrize('ext', sorted(ALLOWED_TYPES))
    def test_allowed_types(self, ext):
        ref = SourceReference('uploads', f'videos/alpha/clip.{ext}')
        assert validate_source(ref) == ext

    @pytest.mark.parametrize('key', ['videos/alpha/clip', 'videos/alpha/clip.', 'README'])
    def test_missing_extension(self, key):
        with pytest.raises(InvalidKeyError, match='no file extension'):
            validate_source(SourceReference('uploads', key))

    @pytest.mark.parametrize('ext', ['png', 'mkv', 'txt', 'MP4', 'Mov'])
    def test_unsupported_types(self, ext):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            validate_source(SourceReference('uploads', f'videos/alpha/clip.{ext}'))

        assert exc_info.value.file_type == ext
        assert str(exc_info.value) == f'filetype: {ext} is not an allowed type'

    def test_only_last_extension_counts(self):
        ref = SourceReference('uploads', 'videos/alpha/clip.mp4.txt')
        with pytest.raises(UnsupportedTypeError):
            validate_source(ref)

    def test_custom_allow_list(self):
        ref = SourceReference('uploads', 'videos/alpha/clip.mkv')
        assert validate_source(ref, frozenset({'mkv'})) == 'mkv'


@pytest.mark.unit
class TestFetchSource:
    """Test cases for fetch_source."""

    def test_writes_input_file(self, scratch_dir, mock_s3_client):
        ref = SourceReference('uploads', 'videos/alpha/clip.webm')

        local_path = fetch_source(ref, scratch_dir)

        assert local_path == scratch_dir / 'input.webm'
        assert local_path.read_bytes() == VIDEO_BYTES
        args = mock_s3_client.download_fileobj.call_args[0]
        assert args[:2] == ('uploads', 'videos/alpha/clip.webm')

    def test_invalid_key_does_no_io(self, scratch_dir, mock_s3_client):
        with pytest.raises(InvalidKeyError):
            fetch_source(SourceReference('uploads', 'videos/alpha/clip'), scratch_dir)

        mock_s3_client.download_fileobj.assert_not_called()
        assert list(scratch_dir.iterdir()) == []

    def test_unsupported_type_does_no_io(self, scratch_dir, mock_s3_client):
        with pytest.raises(UnsupportedTypeError):
            fetch_source(SourceReference('uploads', 'videos/alpha/clip.gif'), scratch_dir)

        mock_s3_client.download_fileobj.assert_not_called()

    def test_client_error_wrapped(self, scratch_dir, mock_s3_client):
        mock_s3_client.download_fileobj.side_effect = ClientError(
            {'Error': {'Code': 'NoSuchKey'}}, 'GetObject'
        )
        ref = SourceReference('uploads', 'videos/alpha/clip.mp4')

        with pytest.raises(FetchError) as exc_info:
            fetch_source(ref, scratch_dir)

        assert exc_info.value.bucket == 'uploads'
        assert exc_info.value.key == 'videos/alpha/clip.mp4'
        assert isinstance(exc_info.value.cause, ClientError)

    def test_local_write_error_wrapped(self, tmp_path, mock_s3_client):
        missing = tmp_path / 'missing'
        ref = SourceReference('uploads', 'videos/alpha/clip.mp4')

        with pytest.raises(FetchError) as exc_info:
            fetch_source(ref, missing)

        assert isinstance(exc_info.value.cause, OSError)


def test_source_filename():
    assert source_filename('mov') == 'input.mov'
