import pytest

from surfpath.classify import (
    PathType,
    blend_name,
    classify_path_name,
    edge_name,
    scan_name,
)
from surfpath.paths import NamedPath


@pytest.mark.parametrize(
    "name, expected",
    [
        ("foo_blend", PathType.BLEND),
        ("foo_edge_3", PathType.EDGE),
        ("foo_scan", PathType.SCAN),
        ("foo_edgecase", PathType.EDGE),
        ("scan_target_blend", PathType.BLEND),
        ("my_scanner_edge_0", PathType.EDGE),
        ("foo_blend_extra", None),
        ("foo", None),
    ],
)
def test_classify_path_name(name, expected):
    assert classify_path_name(name) is expected


def test_generated_names_classify_as_their_type():
    assert classify_path_name(blend_name("S")) is PathType.BLEND
    assert classify_path_name(edge_name("S", 4)) is PathType.EDGE
    assert classify_path_name(scan_name("S")) is PathType.SCAN
    assert edge_name("S", 4) == "S_edge_4"


def test_named_path_keeps_explicit_tag():
    # a surface named like another type must not change the tag it was built with
    p = NamedPath("part_scan_edge_0", [], PathType.EDGE)
    assert p.path_type is PathType.EDGE
    assert NamedPath("part_scan", []).path_type is PathType.SCAN
    assert NamedPath("part", []).path_type is None
