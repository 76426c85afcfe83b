"""
Unit tests for applicant contact masking.
"""
from leads.services.privacy import mask_email, mask_phone, privacy_name


class TestPrivacyName:

    def test_first_name_and_last_initial(self):
        assert privacy_name('Jane Mary Doe') == 'Jane D.'
        assert privacy_name('Jane Doe') == 'Jane D.'

    def test_single_name_unchanged(self):
        assert privacy_name('Prince') == 'Prince'


class TestMaskEmail:

    def test_masks_local_part(self):
        assert mask_email('jane.doe@example.com') == 'j***@example.com'

    def test_not_an_email_unchanged(self):
        assert mask_email('not-an-email') == 'not-an-email'


class TestMaskPhone:

    def test_keeps_both_ends(self):
        assert mask_phone('+27821234567') == '+2***67'

    def test_short_number_unchanged(self):
        assert mask_phone('1234') == '1234'
