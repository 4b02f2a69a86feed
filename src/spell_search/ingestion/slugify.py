import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Derive the document id / URL slug for a spell name.

    Lower-cases, collapses every run of non-alphanumerics into one ``-`` and
    strips separators from both ends. Distinct names that normalize to the
    same slug (``"Fire, Ball"`` / ``"Fire Ball"``) collide; that is accepted.
    """
    return _NON_ALNUM.sub("-", str(name).lower().strip()).strip("-")
