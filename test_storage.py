"""
Tests for the object storage helpers.
"""

import random
import re
from unittest.mock import patch

from nomad_admin.config_loader import get_default_config
from nomad_admin.storage import (
    generate_file_name, to_base36, upload_file, get_public_url, remove_files,
    is_pending_upload, upload_content_type
)

from test_fixtures import FakeSupabaseClient, FakeUploadedFile


class TestFileNames:

    def test_to_base36(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "z"
        assert to_base36(36) == "10"
        assert to_base36(36 ** 3 + 11) == "100b"

    def test_generate_file_name(self):
        name = generate_file_name("Cover Photo.JPG", now_ms=36, rng=random.Random(1))

        assert re.fullmatch(r"10[0-9a-z]{3}\.jpg", name)

    def test_same_inputs_give_same_name(self):
        first = generate_file_name("a.png", now_ms=1000, rng=random.Random(7))
        second = generate_file_name("a.png", now_ms=1000, rng=random.Random(7))
        assert first == second

    def test_name_without_extension(self):
        assert re.fullmatch(r"[0-9a-z]+", generate_file_name("README", now_ms=5, rng=random.Random(0)))

    def test_pending_upload_detection(self):
        assert is_pending_upload(FakeUploadedFile()) is True
        assert is_pending_upload("abc.png") is False
        assert is_pending_upload(b"bytes") is False
        assert is_pending_upload(None) is False

    def test_content_type(self):
        assert upload_content_type(FakeUploadedFile("a.png", type="image/png")) == "image/png"
        assert upload_content_type(FakeUploadedFile("a.unknownext", type=None)) == "application/octet-stream"


class TestStorageCalls:

    def setup_method(self):
        self.client = FakeSupabaseClient()
        config = get_default_config()
        config['storage']['buckets']['spaces'] = 'space-images'
        self.patcher = patch('nomad_admin.config_loader._config_cache', config)
        self.patcher.start()

    def teardown_method(self):
        self.patcher.stop()

    def test_upload_uses_bucket_name_as_given(self):
        path = upload_file(self.client, 'spaces', FakeUploadedFile("cover.png", content=b"png"))

        assert path.endswith(".png")
        assert self.client.storage.paths('space-images') == []
        stored = self.client.storage.objects[('spaces', path)]
        assert stored['content'] == b"png"
        assert stored['options']['content-type'] == "image/png"
        assert stored['options']['upsert'] == "true"

    def test_public_url(self):
        assert get_public_url(self.client, 'spaces', "abc.png") == \
            "https://example.supabase.co/storage/v1/object/public/spaces/abc.png"
        assert get_public_url(self.client, 'spaces', "https://cdn.example.com/x.png") == \
            "https://cdn.example.com/x.png"
        assert get_public_url(self.client, 'spaces', "") is None
        assert get_public_url(self.client, 'spaces', None) is None

    def test_remove_skips_urls_and_blanks(self):
        removed = remove_files(self.client, 'events', ["a.png", "", "https://cdn.example.com/b.png", None])

        assert removed == ["a.png"]
        assert self.client.storage.removed == [('events', ["a.png"])]

    def test_remove_nothing(self):
        assert remove_files(self.client, 'events', [None]) == []
        assert self.client.storage.removed == []
