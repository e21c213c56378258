import pytest

from routemaker.server.utils.slugify import generate_unique_slug, slugify


@pytest.mark.parametrize(
    'name,expected',
    [
        ('Acme Corp', 'acme-corp'),
        ('  Acme   Corp!  ', 'acme-corp'),
        ('Smith & Sons, LLC', 'smith-sons-llc'),
        ('under_score--dash', 'under-score-dash'),
        ('!!!', 'organization'),
        ('Café Ünited', 'cafe-united'),
        ('東京', 'organization'),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


class TestGenerateUniqueSlug:
    def test_free_slug_is_kept(self):
        assert generate_unique_slug('acme', {'acme-2'}) == 'acme'

    def test_first_free_suffix_is_used(self):
        assert generate_unique_slug('acme', {'acme', 'acme-2', 'acme-4'}) == 'acme-3'
