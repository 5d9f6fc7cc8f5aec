"""Tests for idehelp.docblock: canonical block assembly."""

from idehelp.docblock import (
    CLASS_ORDER,
    METHOD_ORDER,
    OTHER_TAGS,
    build_class_docblock,
    build_class_groups,
    collapse_blank_lines,
    mixin_requirements,
    render_docblock,
)
from idehelp.properties import PropertyFact
from idehelp.tags import COMMENT

BUILDER = "\\Illuminate\\Database\\Eloquent\\Builder"

CANONICAL_USER = (
    "/**\n"
    " * <Class description here>\n"
    " *\n"
    " * @property int    $id\n"
    " * @property string $name\n"
    " *\n"
    " * @class     {User}\n"
    " * @namespace {App\\Models}\n"
    " *\n"
    " * @mixin \\Illuminate\\Database\\Eloquent\\Builder\n"
    " */"
)

USER_FACTS = [PropertyFact("id", "int"), PropertyFact("name", "string")]


class TestRenderDocblock:
    def test_group_order_and_spacing(self) -> None:
        groups = {
            "@return": [" * @return int"],
            "@param": [" * @param int $a"],
        }
        assert render_docblock(groups, METHOD_ORDER) == (
            "/**\n * @param int $a\n *\n * @return int\n */"
        )

    def test_absent_groups_skipped_without_blank(self) -> None:
        assert render_docblock({"@return": [" * @return int"]}, METHOD_ORDER) == (
            "/**\n * @return int\n */"
        )

    def test_no_trailing_blank_after_last_group(self) -> None:
        assert render_docblock({"@param": [" * @param int $a"]}, METHOD_ORDER) == (
            "/**\n * @param int $a\n */"
        )

    def test_empty_groups(self) -> None:
        assert render_docblock({}, METHOD_ORDER) == "/**\n */"

    def test_wildcard_places_unknown_groups_in_appearance_order(self) -> None:
        order = [(COMMENT, True), (OTHER_TAGS, True), ("@mixin", False)]
        groups = {
            "@mixin": [" * @mixin \\Foo"],
            "@author": [" * @author Jane"],
            COMMENT: [" * Text."],
            "@deprecated": [" * @deprecated"],
        }
        rendered = render_docblock(groups, order)
        assert rendered == (
            "/**\n"
            " * Text.\n"
            " *\n"
            " * @author Jane\n"
            " *\n"
            " * @deprecated\n"
            " *\n"
            " * @mixin \\Foo\n"
            " */"
        )

    def test_newline_style(self) -> None:
        rendered = render_docblock({"@return": [" * @return int"]}, METHOD_ORDER, newline="\r\n")
        assert rendered == "/**\r\n * @return int\r\n */"

    def test_collapse_blank_lines(self) -> None:
        assert collapse_blank_lines([" * a", " *", " *", " *  ", " * b"]) == [" * a", " *", " * b"]


class TestMixinRequirements:
    def test_present_with_or_without_leading_backslash(self) -> None:
        reqs = mixin_requirements(
            [" * @mixin Illuminate\\Database\\Eloquent\\Builder"], [BUILDER]
        )
        assert len(reqs) == 1
        assert reqs[0].already_present

    def test_missing(self) -> None:
        reqs = mixin_requirements([" * @mixin \\Other"], [BUILDER])
        assert not reqs[0].already_present
        assert reqs[0].render() == f" * @mixin {BUILDER}"


class TestBuildClassDocblock:
    def test_fresh_model_block(self) -> None:
        rendered = build_class_docblock("", "User", "App\\Models", USER_FACTS, [BUILDER])
        assert rendered == CANONICAL_USER

    def test_idempotent(self) -> None:
        once = build_class_docblock("", "User", "App\\Models", USER_FACTS, [BUILDER])
        twice = build_class_docblock(once, "User", "App\\Models", USER_FACTS, [BUILDER])
        assert twice == once

    def test_plain_class_has_no_mixin(self) -> None:
        rendered = build_class_docblock("", "Thing", "App\\Http", [], None)
        assert rendered == (
            "/**\n"
            " * <Class description here>\n"
            " *\n"
            " * @class     {Thing}\n"
            " * @namespace {App\\Http}\n"
            " */"
        )

    def test_existing_content_preserved_and_reordered(self) -> None:
        doc = (
            "/**\n"
            " * @author Jane\n"
            " * Billing account.\n"
            " * @mixin Illuminate\\Database\\Eloquent\\Builder\n"
            " * @property \\Carbon\\Carbon $created_at\n"
            " */"
        )
        facts = [PropertyFact("id", "int"), PropertyFact("created_at", "string")]
        rendered = build_class_docblock(doc, "Account", "App\\Models", facts, [BUILDER])
        assert rendered == (
            "/**\n"
            " * Billing account.\n"
            " *\n"
            " * @property int            $id\n"
            " * @property \\Carbon\\Carbon $created_at\n"
            " *\n"
            " * @class     {Account}\n"
            " * @namespace {App\\Models}\n"
            " *\n"
            " * @mixin Illuminate\\Database\\Eloquent\\Builder\n"
            " *\n"
            " * @author Jane\n"
            " */"
        )

    def test_unavailable_facts_keep_property_lines(self) -> None:
        doc = "/**\n * Text.\n * @property int $id\n * @property string     $name\n */"
        groups = build_class_groups(doc, "User", "App\\Models", None, [BUILDER])
        assert groups["@property"] == [" * @property int $id", " * @property string     $name"]

    def test_existing_class_and_namespace_tags_kept(self) -> None:
        doc = "/**\n * @class {Legacy}\n * @namespace {Old\\Space}\n */"
        groups = build_class_groups(doc, "User", "App\\Models", [])
        assert groups["@class"] == [" * @class     {Legacy}"]
        assert groups["@namespace"] == [" * @namespace {Old\\Space}"]

    def test_custom_placeholder(self) -> None:
        groups = build_class_groups("", "User", "App", [], placeholder="Describe me.")
        assert groups[COMMENT] == [" * Describe me."]

    def test_empty_placeholder_adds_no_comment(self) -> None:
        groups = build_class_groups("", "User", "App", [], placeholder="")
        assert COMMENT not in groups

    def test_duplicate_mixins_collapsed(self) -> None:
        doc = f"/**\n * @mixin {BUILDER}\n * @mixin {BUILDER}\n */"
        groups = build_class_groups(doc, "User", "App\\Models", [], [BUILDER])
        assert groups["@mixin"] == [f" * @mixin {BUILDER}"]

    def test_class_order_names_wildcard_last(self) -> None:
        assert CLASS_ORDER[-1][0] == OTHER_TAGS
