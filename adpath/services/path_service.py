"""Path Service - Parses DNs into hierarchy segments and build plans."""

from dataclasses import dataclass, field
from typing import List

from ..constants import (
    CONTAINER_PREFIX,
    HIERARCHY_PREFIXES,
    ROOT_PREFIX,
    SegmentKind,
)
from ..exceptions import FormatError


@dataclass(frozen=True)
class PathSegment:
    """One hierarchy node of a DN."""
    kind: SegmentKind
    name: str
    raw: str

    @property
    def is_container(self) -> bool:
        return self.kind == SegmentKind.CONTAINER


@dataclass(frozen=True)
class ParsedPath:
    """A DN split into its root suffix and hierarchy segments (leaf first)."""
    root: str
    segments: List[PathSegment] = field(default_factory=list)

    @property
    def dn(self) -> str:
        """Rebuild the full DN from segments and root."""
        return ",".join([segment.raw for segment in self.segments] + [self.root])


class PathService:
    """Handles parsing of DNs and ordering of their segments."""

    @staticmethod
    def strip_unescaped(text: str) -> str:
        """Strip surrounding whitespace, keeping a trailing space escaped as "\\ "."""
        text = text.lstrip()
        end = len(text)
        while end > 0 and text[end - 1].isspace():
            backslashes = 0
            while backslashes < end - 1 and text[end - 2 - backslashes] == "\\":
                backslashes += 1
            if backslashes % 2:
                break
            end -= 1
        return text[:end]

    @staticmethod
    def split_dn(path: str) -> List[str]:
        """Split a DN on unescaped commas.

        Args:
            path: DN like "OU=a\\, b,DC=example,DC=com"

        Returns:
            Tokens with unescaped surrounding whitespace stripped. Escape
            sequences are kept.
        """
        tokens = []
        current = []
        escaped = False

        for char in path:
            if escaped:
                current.append(char)
                escaped = False
            elif char == "\\":
                current.append(char)
                escaped = True
            elif char == ",":
                tokens.append(PathService.strip_unescaped("".join(current)))
                current = []
            else:
                current.append(char)

        tokens.append(PathService.strip_unescaped("".join(current)))
        return tokens

    @classmethod
    def parse(cls, path: str) -> ParsedPath:
        """Parse a DN into a root and its hierarchy segments.

        Args:
            path: DN like "OU=IT,OU=Departments,DC=example,DC=com"

        Returns:
            ParsedPath with root "DC=example,DC=com" and segments [IT, Departments]

        Raises:
            FormatError: If the path does not match the DN grammar
        """
        if not path or not path.strip():
            raise FormatError(path, "path is empty")

        segments = []
        root_tokens = []

        for token in cls.split_dn(path.strip()):
            if "=" not in token:
                raise FormatError(path, f"token '{token}' is not TYPE=value")

            type_code, value = (cls.strip_unescaped(part) for part in token.split("=", 1))
            if not type_code or not value:
                raise FormatError(path, f"token '{token}' has an empty type or value")

            if type_code in HIERARCHY_PREFIXES:
                if root_tokens:
                    raise FormatError(path, f"'{token}' appears after the domain components")
                kind = SegmentKind.CONTAINER if type_code == CONTAINER_PREFIX else SegmentKind.NON_CONTAINER
                segments.append(PathSegment(kind=kind, name=value, raw=f"{type_code}={value}"))
            else:
                root_tokens.append(f"{type_code}={value}")

        if not any(token.startswith(f"{ROOT_PREFIX}=") for token in root_tokens):
            raise FormatError(path, "no DC= component found")

        return ParsedPath(root=",".join(root_tokens), segments=segments)

    @staticmethod
    def plan(parsed: ParsedPath) -> List[PathSegment]:
        """Order segments root first so parents are handled before children.

        Examples:
            >>> PathService.plan(PathService.parse("OU=a,OU=b,DC=x,DC=y"))
            [PathSegment(kind=..., name='b', ...), PathSegment(kind=..., name='a', ...)]
        """
        return list(reversed(parsed.segments))

    @staticmethod
    def domain_from_root(root: str) -> str:
        """Convert DC components to a DNS domain name.

        Examples:
            >>> PathService.domain_from_root("DC=corp,DC=example,DC=com")
            "corp.example.com"
        """
        labels = []
        for token in root.split(","):
            type_code, _, value = token.strip().partition("=")
            if type_code.strip().upper() == ROOT_PREFIX:
                labels.append(value.strip())
        return ".".join(labels)

    @staticmethod
    def is_under(dn: str, base_dn: str) -> bool:
        """Check whether dn equals base_dn or lies beneath it (case-insensitive)."""
        def normalize(value: str) -> str:
            return ",".join(part.strip().lower() for part in value.split(","))

        dn_norm = normalize(dn)
        base_norm = normalize(base_dn)
        return dn_norm == base_norm or dn_norm.endswith("," + base_norm)
