from urllib.parse import quote

PLACEHOLDER_BASE_URL = "https://ui-avatars.com/api/"


def placeholder_image_url(tree_name: str) -> str:
    """Deterministic avatar URL whose background hue is derived from the tree name."""
    hue = sum(ord(char) for char in tree_name) % 360
    return (
        f"{PLACEHOLDER_BASE_URL}?name={quote(tree_name, safe='', errors='replace')}"
        f"&size=400&background={hue:06x}&color=fff&bold=true"
    )
