"""
Bucket key naming convention for product files.

Product files are stored as:

    <path>/[<slug>,<version>]<rest-of-filename>

where <path> is an optional bucket-internal prefix. Leading and trailing
slashes on the prefix are tolerated, and the prefix may be empty.

Also holds the semver 2.0 grammar. Versions pulled out of keys are not
checked against it; tags like "2.0.x-rc" are listed as-is.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from artifact_store.common.exceptions import ValidationError

SEMVER2_REGEX = (
    r"(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
)

_SEMVER2_FULL = re.compile(f"^{SEMVER2_REGEX}$")


def parse_semver(version: str) -> Optional[Dict[str, Optional[str]]]:
    """
    Split a semver 2.0 string into its named parts.

    Returns:
        Dict with major, minor, patch, prerelease, buildmetadata keys,
        or None when the string is not valid semver
    """
    match = _SEMVER2_FULL.match(version)
    if match is None:
        return None
    return match.groupdict()


@dataclass(frozen=True)
class ProductFileName:
    """A bucket key that follows the product naming convention."""

    key: str
    slug: str
    version: str

    @property
    def filename(self) -> str:
        """Base name of the key, used for glob matching."""
        return self.key.rsplit("/", 1)[-1]


class ProductFileNaming:
    """
    Matches bucket keys against the naming convention for one product.

    Path, slug and version are matched literally; regex metacharacters in
    them carry no meaning.

    Usage:
        naming = ProductFileNaming(path="rel", slug="db")
        naming.match_version("rel/[db,1.2.0]linux.tgz")   # "1.2.0"
        naming.matches("rel/[db,1.2.0]linux.tgz", "1.2.0")  # True
    """

    def __init__(self, path: str, slug: str):
        self.path = path or ""
        self.slug = slug
        self._head = r"^/?{path}/?\[{slug},".format(
            path=re.escape(self.path.strip("/")),
            slug=re.escape(slug),
        )
        self._any_version = re.compile(self._head + r"(.*?)\]")
        self._exact_versions: Dict[str, "re.Pattern[str]"] = {}

    def match_version(self, key: str) -> Optional[str]:
        """Version token of a key, or None if the key isn't a file of this product."""
        match = self._any_version.match(key)
        if match is None:
            return None
        return match.group(1)

    def matches(self, key: str, version: str) -> bool:
        """Whether the key carries exactly the [slug,version] tag."""
        return self.version_pattern(version).match(key) is not None

    def parse(self, key: str) -> Optional[ProductFileName]:
        version = self.match_version(key)
        if version is None:
            return None
        return ProductFileName(key=key, slug=self.slug, version=version)

    def version_pattern(self, version: str) -> "re.Pattern[str]":
        """Compiled pattern for keys tagged exactly [slug,version], built once per version."""
        pattern = self._exact_versions.get(version)
        if pattern is None:
            pattern = re.compile(self._head + re.escape(version) + r"\]")
            self._exact_versions[version] = pattern
        return pattern


def compile_glob(glob: str) -> "re.Pattern[str]":
    """
    Compile a filename glob for use with fullmatch().

    Syntax:
        *       any run of characters other than "/"
        ?       any single character other than "/"
        [...]   character class; a leading ^ negates it, ranges use a-z,
                and "-" or "]" inside a class must be escaped
        \\c      the character c, literally

    Raises:
        ValidationError: If the glob is malformed
    """
    parts = []
    i = 0
    while i < len(glob):
        c = glob[i]
        i += 1
        if c == "*":
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "\\":
            if i >= len(glob):
                raise _malformed_glob(glob, "trailing backslash")
            parts.append(re.escape(glob[i]))
            i += 1
        elif c == "[":
            char_class, i = _char_class(glob, i)
            parts.append(char_class)
        else:
            parts.append(re.escape(c))
    return re.compile("".join(parts), re.DOTALL)


def _char_class(glob: str, i: int) -> Tuple[str, int]:
    negate = i < len(glob) and glob[i] == "^"
    if negate:
        i += 1

    ranges = []
    count = 0
    while True:
        if i >= len(glob):
            raise _malformed_glob(glob, "unterminated character class")
        if glob[i] == "]" and count:
            i += 1
            break
        lo, i = _class_char(glob, i)
        hi = lo
        if i < len(glob) and glob[i] == "-":
            hi, i = _class_char(glob, i + 1)
        count += 1
        # An inverted range matches nothing
        if lo <= hi:
            ranges.append(re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}")

    if not ranges:
        return (".", i) if negate else ("(?!)", i)
    return "[{}{}]".format("^" if negate else "", "".join(ranges)), i


def _class_char(glob: str, i: int) -> Tuple[str, int]:
    if i >= len(glob):
        raise _malformed_glob(glob, "unterminated character class")
    c = glob[i]
    if c in "-]":
        raise _malformed_glob(glob, f"unescaped '{c}' in character class")
    if c == "\\":
        i += 1
        if i >= len(glob):
            raise _malformed_glob(glob, "trailing backslash")
        c = glob[i]
    return c, i + 1


def _malformed_glob(glob: str, reason: str) -> ValidationError:
    return ValidationError(
        f"the glob '{glob}' is malformed: {reason}",
        context={"fields": ["glob"], "glob": glob},
    )
