"""
Domain thesaurus for form labels.

Maps a canonical term to the variants people use for it on application
forms (identity, contact, address, education, employment, online profiles).
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Set

DEFAULT_SYNONYMS: Mapping[str, Sequence[str]] = MappingProxyType({
    "name": ("fullname", "full", "first", "last", "surname", "given", "middle"),
    "email": ("mail", "e-mail", "gmail", "outlook"),
    "phone": ("mobile", "telephone", "tel", "contact", "whatsapp", "cell", "number", "no"),
    "address": ("addr", "location", "street", "st", "city", "state", "province",
                "zip", "zipcode", "postcode", "pincode", "country"),
    "date": ("dob", "birth", "birthday", "day", "month", "year"),
    "college": ("university", "school", "institute", "campus"),
    "degree": ("qualification", "education", "course", "program", "major"),
    "company": ("organization", "organisation", "employer", "workplace", "firm",
                "corp", "corporation"),
    "role": ("position", "title", "job", "designation"),
    "experience": ("exp", "years", "yoe", "workexp"),
    "gpa": ("cgpa", "grade", "score"),
    "github": ("git", "gh", "repository", "repo", "username", "handle"),
    "linkedin": ("linkdin", "profile", "li"),
    "website": ("portfolio", "site", "url", "link"),
    "gender": ("sex",),
    "nationality": ("citizenship",),
})


class SynonymExpander:
    """
    Enriches token sets with variants from a fixed thesaurus.

    Expansion is one level deep: variants are added but never expanded
    themselves, and no token is ever removed.
    """

    def __init__(self, table: Optional[Mapping[str, Sequence[str]]] = None):
        source = DEFAULT_SYNONYMS if table is None else table
        self.table: Mapping[str, tuple] = MappingProxyType(
            {key: tuple(variants) for key, variants in source.items()}
        )

    def expand(self, tokens: Iterable[str]) -> Set[str]:
        out = set(tokens)
        for token in list(out):
            out.update(self.table.get(token, ()))
        return out
