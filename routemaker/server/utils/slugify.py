import re
import unicodedata

DEFAULT_SLUG = 'organization'


def slugify(name: str) -> str:
    """Lower-case, URL-safe form of ``name`` ('Acme Corp!' -> 'acme-corp')."""
    # accents folded to ASCII, anything else non-ASCII dropped
    slug = unicodedata.normalize('NFKD', name).encode('ascii', 'ignore').decode()
    slug = slug.lower().strip()
    slug = re.sub(r'[^\w\s-]', '', slug, flags=re.ASCII)
    slug = re.sub(r'[\s_-]+', '-', slug)
    slug = slug.strip('-')
    return slug or DEFAULT_SLUG


def generate_unique_slug(base_slug: str, existing_slugs: set[str]) -> str:
    """Append -2, -3, ... to ``base_slug`` until it is not in ``existing_slugs``."""
    if base_slug not in existing_slugs:
        return base_slug
    counter = 2
    while f'{base_slug}-{counter}' in existing_slugs:
        counter += 1
    return f'{base_slug}-{counter}'
