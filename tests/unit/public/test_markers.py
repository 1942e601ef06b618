from __future__ import annotations

from typing import Annotated, get_args, get_origin

from diresolve import All, Named
from diresolve._internal.markers import AllMarker, find_all_marker, find_named


class Plugin:
    pass


def test_all_marker_wraps_base_type_in_annotated() -> None:
    annotation = All[Plugin]

    assert get_origin(annotation) is Annotated
    assert get_args(annotation) == (Plugin, AllMarker(dependency_key=Plugin))


def test_all_marker_strips_existing_annotated_metadata() -> None:
    annotation = All[Annotated[Plugin, Named("core")]]

    assert get_args(annotation) == (Plugin, AllMarker(dependency_key=Plugin))


def test_find_helpers_pick_markers_from_qualifiers() -> None:
    qualifiers = ("unrelated", Named("core"), AllMarker(dependency_key=Plugin))

    assert find_named(qualifiers) == Named("core")
    assert find_all_marker(qualifiers) == AllMarker(dependency_key=Plugin)
    assert find_named(()) is None
    assert find_all_marker(("unrelated",)) is None
