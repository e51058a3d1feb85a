"""
Test configuration and fixtures for the frame extraction Lambda.

S3 and the ffmpeg subprocess are always mocked.  Files are written for real
inside pytest's ``tmp_path`` so the workspace, collector and pipeline code
run against an actual filesystem.
"""
import os
from unittest.mock import Mock, patch

import pytest

from frame_extract import s3_utils
from frame_extract.models import FrameExtractionConfig
from tests.helpers import VIDEO_BYTES, fake_ffmpeg, make_s3_event

# Set test environment variables
os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'
os.environ['LOG_LEVEL'] = 'INFO'
os.environ['NEW_BUCKET'] = 'test-frames'
os.environ['FRAMERATE'] = '1'


@pytest.fixture
def s3_event():
    """Sample S3 event for a supported video."""
    return make_s3_event('videos/alpha/clip.mp4')


@pytest.fixture
def mock_lambda_context():
    """Mock Lambda context for testing."""
    context = Mock()
    context.function_name = 'frame-extractor'
    context.aws_request_id = 'test-request-id-123'
    context.get_remaining_time_in_millis.return_value = 30000
    return context


@pytest.fixture
def scratch_dir(tmp_path):
    """An existing, empty scratch directory."""
    path = tmp_path / 'scratch'
    path.mkdir()
    return path


@pytest.fixture
def config(scratch_dir):
    """Pipeline configuration pointing at the test scratch directory."""
    return FrameExtractionConfig(
        destination_bucket='test-frames',
        frame_rate=1,
        scratch_dir=scratch_dir,
        upload_concurrency=4,
    )


@pytest.fixture
def mock_s3_client():
    """Mocked boto3 S3 client; downloads write ``VIDEO_BYTES``."""
    client = Mock()

    def _download_fileobj(bucket, key, fh):
        fh.write(VIDEO_BYTES)

    client.download_fileobj.side_effect = _download_fileobj
    client.put_object.return_value = {'ETag': '"abc"'}

    with patch.object(s3_utils, '_get_s3_client', return_value=client):
        yield client


@pytest.fixture
def mock_ffmpeg():
    """Patch the ffmpeg subprocess; defaults to writing three frames."""
    with patch('frame_extract.ffmpeg_utils.subprocess.run') as run:
        run.side_effect = fake_ffmpeg(frame_count=3)
        yield run
