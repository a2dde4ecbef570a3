"""
Unit tests for diff_utils module.
"""

from datetime import date, time

from nomad_admin.diff_utils import (
    calculate_changes, changed_values, has_changes, format_changes_for_display, normalize_value
)

from test_fixtures import FakeUploadedFile


class TestDiffUtils:
    """Test cases for the edit page diff helpers."""

    def setup_method(self):
        self.stored = {
            'id': "spaces-1",
            'name': "Nomad Hub",
            'capacity': 20,
            'opening_time': "08:00:00",
            'start_date': "2025-01-10T00:00:00+00:00",
            'amenities': ["wifi", "coffee"],
            'contact_email': None,
            'image': "abc.png",
        }

    def test_no_changes(self):
        edited = {
            'name': "Nomad Hub",
            'capacity': 20.0,
            'opening_time': "08:00",
            'start_date': date(2025, 1, 10),
            'amenities': ["coffee", "wifi"],
            'contact_email': "",
            'image': "abc.png",
        }

        changes = calculate_changes(self.stored, edited)

        assert changes == {}
        assert has_changes(changes) is False

    def test_value_changed(self):
        changes = calculate_changes(self.stored, {'name': "Nomad Hub Ubud", 'capacity': 25})

        assert changes == {
            'name': {'old': "Nomad Hub", 'new': "Nomad Hub Ubud"},
            'capacity': {'old': 20, 'new': 25},
        }
        assert changed_values(changes) == {'name': "Nomad Hub Ubud", 'capacity': 25}

    def test_list_membership_change(self):
        changes = calculate_changes(self.stored, {'amenities': ["wifi"]})
        assert changes == {'amenities': {'old': ["wifi", "coffee"], 'new': ["wifi"]}}

    def test_ordered_lists_compare_order(self):
        changes = calculate_changes({'gallery': ["a", "b"]}, {'gallery': ["b", "a"]})
        assert 'gallery' in changes

    def test_cleared_value(self):
        changes = calculate_changes(self.stored, {'image': None})
        assert changes == {'image': {'old': "abc.png", 'new': None}}

    def test_pending_upload_is_always_a_change(self):
        upload = FakeUploadedFile("abc.png")

        changes = calculate_changes(self.stored, {'image': upload})

        assert changes['image']['new'] is upload

    def test_time_change_detected(self):
        changes = calculate_changes(self.stored, {'opening_time': time(9, 0)})
        assert changes['opening_time']['old'] == "08:00:00"

    def test_restricted_field_names(self):
        changes = calculate_changes(self.stored, {'name': "Other", 'capacity': 30}, fields=['capacity'])
        assert list(changes) == ['capacity']

    def test_normalize_value(self):
        assert normalize_value("  ") is None
        assert normalize_value(3.0) == 3
        assert normalize_value(True) is True
        assert normalize_value([" a ", 2.0]) == ["a", 2]

    def test_format_changes_for_display(self):
        changes = {
            'name': {'old': "Nomad Hub", 'new': "Nomad Hub Ubud"},
            'allow_booking': {'old': True, 'new': False},
            'tags': {'old': [], 'new': ["quiet", "central"]},
            'image': {'old': "abc.png", 'new': FakeUploadedFile("cover.jpg")},
            'content': {'old': None, 'new': "x" * 100},
        }

        rows = format_changes_for_display(changes, {'name': "Name *", 'allow_booking': "Allow booking"})

        assert rows[0] == {'Field': "Name", 'Before': "Nomad Hub", 'After': "Nomad Hub Ubud"}
        assert rows[1] == {'Field': "Allow booking", 'Before': "Yes", 'After': "No"}
        assert rows[2] == {'Field': "tags", 'Before': "-", 'After': "quiet, central"}
        assert rows[3]['After'] == "📎 cover.jpg"
        assert rows[4]['Before'] == "-"
        assert rows[4]['After'] == "x" * 77 + "..."
