"""Icon names for MIME types."""

from typing import Dict, Iterable, List, Tuple

from .hierarchy import HierarchyGraph
from .registry import CanonicalType

DEFAULT_GENERIC_ICON = "application-x-generic"


class IconResolver:
    """Derives specific and generic icon names from icon records and the hierarchy."""

    def __init__(
        self,
        hierarchy: HierarchyGraph,
        icons: Iterable[Tuple[CanonicalType, str]] = (),
        generic_icons: Iterable[Tuple[CanonicalType, str]] = (),
        default_generic_icon: str = DEFAULT_GENERIC_ICON,
    ) -> None:
        self._hierarchy = hierarchy
        self._default_generic_icon = default_generic_icon
        self._icons: Dict[int, str] = {}
        self._generic_icons: Dict[int, str] = {}
        # First record wins: earlier sources take precedence
        for mime_type, name in icons:
            self._icons.setdefault(mime_type.id, name)
        for mime_type, name in generic_icons:
            self._generic_icons.setdefault(mime_type.id, name)

    def icon_name(self, mime_type: CanonicalType) -> str:
        """Explicit icon of *mime_type*, or ``media-subtype``."""
        explicit = self._icons.get(mime_type.id)
        if explicit is not None:
            return explicit
        return mime_type.name.replace("/", "-")

    def generic_icon_name(self, mime_type: CanonicalType) -> str:
        """Generic icon of *mime_type*.

        Lookup order: explicit generic icon, the explicit generic icon of
        the nearest ancestor that has one, ``<media>-x-generic``, then the
        configured default.
        """
        explicit = self._generic_icons.get(mime_type.id)
        if explicit is not None:
            return explicit

        for ancestor in self._hierarchy.ancestors(mime_type):
            inherited = self._generic_icons.get(ancestor.id)
            if inherited is not None:
                return inherited

        if mime_type.media:
            return f"{mime_type.media}-x-generic"
        return self._default_generic_icon

    def icon_names(self, mime_type: CanonicalType) -> List[str]:
        """All candidate icon names, most specific first, without duplicates."""
        names: List[str] = []
        explicit = self._icons.get(mime_type.id)
        if explicit is not None:
            names.append(explicit)
        for name in (mime_type.name.replace("/", "-"), self.generic_icon_name(mime_type)):
            if name not in names:
                names.append(name)
        return names
