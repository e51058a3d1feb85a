"""Shared builders for S3 events and fake ffmpeg runs."""
import subprocess
from pathlib import Path

VIDEO_BYTES = b'\x00\x00\x00\x18ftypmp42fake-video-payload'
PNG_HEADER = b'\x89PNG\r\n\x1a\n'


def make_s3_event(key, bucket='test-video-uploads'):
    """Build an S3 ObjectCreated notification for *key* (already URL-encoded)."""
    return {
        'Records': [
            {
                'eventVersion': '2.1',
                'eventSource': 'aws:s3',
                'eventName': 'ObjectCreated:Put',
                'eventTime': '2024-01-15T10:30:00.000Z',
                's3': {
                    'bucket': {'name': bucket},
                    'object': {'key': key, 'size': len(VIDEO_BYTES)},
                },
            }
        ]
    }


def fake_ffmpeg(frame_count=3, returncode=0, stderr=''):
    """Side effect for ``subprocess.run`` that writes numbered PNG frames.

    The output pattern is the last argument, e.g. ``/tmp/x/%d.png``.
    """
    def _run(args, **kwargs):
        pattern = Path(args[-1])
        for i in range(1, frame_count + 1):
            frame = pattern.parent / (pattern.name % i)
            frame.write_bytes(PNG_HEADER + f'frame-{i}'.encode())
        return subprocess.CompletedProcess(args, returncode, stdout='', stderr=stderr)
    return _run
