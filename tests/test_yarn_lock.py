import logging
import threading

import pytest
import yaml

from berry_lockfile import (
    FormatError,
    Ident,
    LinkType,
    LockfileSyntaxError,
    Metadata,
    ParseOptions,
    TrailingContentError,
    TruncatedInputError,
    parse_lockfile,
)


def _by_name(lockfile):
    return {str(package.ident): package for package in lockfile.packages}


def test_parses_realistic_lockfile(berry_lock: str) -> None:
    lockfile = parse_lockfile(berry_lock)

    assert lockfile.metadata == Metadata(version=6, cache_key="8")
    assert [str(package.ident) for package in lockfile.packages] == [
        "@babel/code-frame",
        "debug",
        "fsevents",
        "loose-envify",
        "react-dom",
        "root-workspace-0b6124",
    ]

    packages = _by_name(lockfile)
    code_frame = packages["@babel/code-frame"]
    assert code_frame.ident == Ident(scope="babel", name="code-frame")
    assert code_frame.version == "7.12.13"
    assert code_frame.dependencies == (("@babel/highlight", "^7.12.13"),)
    assert code_frame.language_name == "node"
    assert code_frame.link_type is LinkType.HARD
    assert [str(d) for d in code_frame.descriptors] == [
        "@babel/code-frame@npm:^7.0.0",
        "@babel/code-frame@npm:^7.10.4",
    ]

    assert packages["fsevents"].conditions == "os=darwin"
    assert packages["loose-envify"].bin == (("loose-envify", "cli.js"),)
    assert packages["react-dom"].peer_dependencies == (("react", "17.0.2"),)
    assert packages["react-dom"].peer_dependencies_meta["react"].optional is True

    workspace = packages["root-workspace-0b6124"]
    assert workspace.link_type is LinkType.SOFT
    assert workspace.checksum is None
    assert workspace.dependencies_meta["fsevents"].optional is True
    assert workspace.dependencies_meta["fsevents"].built is False
    assert workspace.dependencies_meta["fsevents"].unplugged is None


def test_agrees_with_yaml_loader(berry_lock: str) -> None:
    """The lockfile grammar is a YAML subset; a YAML loader must agree."""
    document = yaml.safe_load(berry_lock)
    lockfile = parse_lockfile(berry_lock)

    assert document["__metadata"]["version"] == lockfile.metadata.version
    assert str(document["__metadata"]["cacheKey"]) == lockfile.metadata.cache_key

    entries = [value for key, value in document.items() if key != "__metadata"]
    assert len(entries) == len(lockfile.packages)
    for entry, package in zip(entries, lockfile.packages):
        assert str(entry["version"]) == package.version
        assert entry["resolution"] == package.resolution
        expected = {name: str(range_) for name, range_ in (entry.get("dependencies") or {}).items()}
        assert dict(package.dependencies) == expected
        assert entry.get("linkType") == (package.link_type.value if package.link_type else None)


def test_parsing_is_idempotent(berry_lock: str) -> None:
    assert parse_lockfile(berry_lock) == parse_lockfile(berry_lock)


def test_bytes_input_matches_text(berry_lock: str) -> None:
    assert parse_lockfile(berry_lock.encode("utf-8")) == parse_lockfile(berry_lock)


def test_crlf_line_endings_match_lf(berry_lock: str) -> None:
    assert parse_lockfile(berry_lock.replace("\n", "\r\n")) == parse_lockfile(berry_lock)


def test_leading_byte_order_mark_is_ignored(berry_lock: str) -> None:
    assert parse_lockfile("\ufeff" + berry_lock) == parse_lockfile(berry_lock)


def test_invalid_utf8_is_format_error() -> None:
    with pytest.raises(FormatError):
        parse_lockfile(b"# banner\n\xff\xfe")


def test_multi_descriptor_entry_yields_one_package(make_lockfile) -> None:
    text = make_lockfile(
        '"c@*, c@workspace:packages/c":\n'
        "  version: 1.0.0\n"
        '  resolution: "c@workspace:packages/c"\n'
    )
    lockfile = parse_lockfile(text)

    assert len(lockfile.packages) == 1
    package = lockfile.packages[0]
    assert [d.range for d in package.descriptors] == ["*", "workspace:packages/c"]
    assert {d.ident.name for d in package.descriptors} == {"c"}
    pairs = list(lockfile.iter_descriptors())
    assert [str(d) for d, _ in pairs] == ["c@*", "c@workspace:packages/c"]
    assert all(p is package for _, p in pairs)


def test_alias_idents_match_across_entry(berry_lock: str) -> None:
    for package in parse_lockfile(berry_lock).packages:
        assert len({d.ident for d in package.descriptors}) == 1


def test_npm_alias_descriptors_share_entry(make_lockfile) -> None:
    text = make_lockfile(
        '"string-width-cjs@npm:string-width@^4.2.0, string-width@npm:^4.1.0":\n'
        "  version: 4.2.3\n"
        '  resolution: "string-width@npm:4.2.3"\n'
    )
    package = parse_lockfile(text).packages[0]

    assert package.ident == Ident(scope=None, name="string-width")
    assert [str(d.ident) for d in package.descriptors] == ["string-width-cjs", "string-width"]
    assert package.descriptors[0].range == "npm:string-width@^4.2.0"


def test_unknown_keys_are_skipped(make_lockfile) -> None:
    text = make_lockfile(
        '"a@npm:1.0.0":\n'
        "  version: 1.0.0\n"
        "  futureField: 123\n"
        '  resolution: "a@npm:1.0.0"\n'
        "  futureBlock:\n"
        "    nested: value\n"
        "      deeper: value\n"
        "  languageName: node\n"
        "  linkType: hard\n"
    )
    package = parse_lockfile(text).packages[0]

    assert package.version == "1.0.0"
    assert package.resolution == "a@npm:1.0.0"
    assert package.language_name == "node"
    assert package.link_type is LinkType.HARD


def test_scoped_package(make_lockfile) -> None:
    text = make_lockfile(
        '"@scope/pkg@npm:1.2.3":\n  version: 1.2.3\n  resolution: "@scope/pkg@npm:1.2.3"\n'
    )
    package = parse_lockfile(text).packages[0]

    assert package.ident == Ident(scope="scope", name="pkg")
    assert package.descriptors[0].ident == Ident(scope="scope", name="pkg")
    assert package.locator.reference == "npm:1.2.3"


def test_dependency_order_and_repeats_are_preserved(make_lockfile) -> None:
    text = make_lockfile(
        '"a@npm:1.0.0":\n'
        "  version: 1.0.0\n"
        '  resolution: "a@npm:1.0.0"\n'
        "  dependencies:\n"
        "    ms: 0.6.2\n"
        "    abc: 1.0.0\n"
        "    ms: 0.7.0\n"
    )
    package = parse_lockfile(text).packages[0]

    assert package.dependencies == (("ms", "0.6.2"), ("abc", "1.0.0"), ("ms", "0.7.0"))


def test_alternation_range_is_opaque(make_lockfile) -> None:
    text = make_lockfile(
        '"js-tokens@npm:^3.0.0 || ^4.0.0":\n'
        "  version: 4.0.0\n"
        '  resolution: "js-tokens@npm:4.0.0"\n'
    )
    descriptor = parse_lockfile(text).packages[0].descriptors[0]

    assert descriptor.range == "npm:^3.0.0 || ^4.0.0"
    assert descriptor.protocol == "npm"


def test_duplicate_entries_are_all_retained(make_lockfile, caplog) -> None:
    entry = '"a@npm:1.0.0":\n  version: 1.0.0\n  resolution: "a@npm:1.0.0"\n'
    text = make_lockfile(entry + "\n" + entry.replace("version: 1.0.0", "version: 1.0.1"))

    with caplog.at_level(logging.WARNING, logger="berry_lockfile"):
        lockfile = parse_lockfile(text)

    assert [package.version for package in lockfile.packages] == ["1.0.0", "1.0.1"]
    assert "a@npm:1.0.0" in caplog.text


def test_duplicate_warning_can_be_disabled(make_lockfile, caplog) -> None:
    entry = '"a@npm:1.0.0":\n  version: 1.0.0\n  resolution: "a@npm:1.0.0"\n'
    text = make_lockfile(entry + entry)

    with caplog.at_level(logging.WARNING, logger="berry_lockfile"):
        parse_lockfile(text, ParseOptions(warn_on_duplicates=False))

    assert caplog.records == []


def test_lockfile_without_entries(make_lockfile) -> None:
    lockfile = parse_lockfile(make_lockfile(""))
    assert lockfile.packages == ()
    assert lockfile.totals == {"packages": 0, "descriptors": 0}


def test_concurrent_parses_agree(berry_lock: str) -> None:
    expected = parse_lockfile(berry_lock)
    results = []

    def _worker() -> None:
        results.append(parse_lockfile(berry_lock))

    threads = [threading.Thread(target=_worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == [expected] * 4


def test_parsed_models_are_hashable(berry_lock: str) -> None:
    lockfile = parse_lockfile(berry_lock)

    assert hash(lockfile) == hash(parse_lockfile(berry_lock))
    assert len(set(lockfile.packages)) == len(lockfile.packages)
    with_meta = _by_name(lockfile)["root-workspace-0b6124"]
    assert with_meta.dependencies_meta
    assert with_meta in {with_meta}


def test_unknown_metadata_keys_are_skipped_with_nested_lines(make_lockfile) -> None:
    metadata = "__metadata:\n  version: 6\n  extra:\n    x: 1\n\n      y: 2\n  cacheKey: 8\n"
    entry = '"a@npm:1.0.0":\n  version: 1.0.0\n  resolution: "a@npm:1.0.0"\n'
    lockfile = parse_lockfile(make_lockfile(entry, metadata=metadata))

    assert lockfile.metadata == Metadata(version=6, cache_key="8")
    assert len(lockfile.packages) == 1


class TestErrors:
    def test_trailing_garbage(self, berry_lock: str) -> None:
        text = berry_lock + "\nthis is not an entry\n"
        with pytest.raises(TrailingContentError) as excinfo:
            parse_lockfile(text)
        assert excinfo.value.offset == text.index("this is not an entry")

    def test_trailing_whitespace_is_allowed(self, berry_lock: str) -> None:
        assert parse_lockfile(berry_lock + "\n  \n\n") == parse_lockfile(berry_lock)

    def test_malformed_metadata_version(self, make_lockfile) -> None:
        text = make_lockfile("", metadata="__metadata:\n  version: not-a-number\n")
        with pytest.raises(FormatError) as excinfo:
            parse_lockfile(text)
        assert excinfo.value.offset == text.index("not-a-number")

    def test_missing_metadata_version(self, make_lockfile) -> None:
        text = make_lockfile("", metadata="__metadata:\n  cacheKey: 8\n")
        with pytest.raises(FormatError):
            parse_lockfile(text)

    def test_empty_input(self) -> None:
        with pytest.raises(TruncatedInputError):
            parse_lockfile("")

    def test_banner_only(self) -> None:
        with pytest.raises(TruncatedInputError):
            parse_lockfile("# yarn lockfile\n")

    def test_missing_banner(self) -> None:
        with pytest.raises(LockfileSyntaxError) as excinfo:
            parse_lockfile("__metadata:\n  version: 6\n")
        assert excinfo.value.offset == 0

    def test_missing_metadata_header(self) -> None:
        with pytest.raises(LockfileSyntaxError):
            parse_lockfile("# banner\n\nmetadata:\n  version: 6\n")

    def test_unknown_link_type_fails(self, make_lockfile) -> None:
        text = make_lockfile(
            '"a@npm:1.0.0":\n'
            "  version: 1.0.0\n"
            '  resolution: "a@npm:1.0.0"\n'
            "  linkType: symbolic\n"
        )
        with pytest.raises(FormatError) as excinfo:
            parse_lockfile(text)
        assert excinfo.value.offset == text.index("symbolic")

    def test_missing_resolution(self, make_lockfile) -> None:
        with pytest.raises(FormatError):
            parse_lockfile(make_lockfile('"a@npm:1.0.0":\n  version: 1.0.0\n'))

    def test_malformed_known_block_fails_whole_parse(self, make_lockfile) -> None:
        text = make_lockfile(
            '"a@npm:1.0.0":\n'
            "  version: 1.0.0\n"
            '  resolution: "a@npm:1.0.0"\n'
            "  dependencies:\n"
            "    ms\n"
        )
        with pytest.raises(LockfileSyntaxError):
            parse_lockfile(text)

    def test_inline_value_on_block_key_fails(self, make_lockfile) -> None:
        text = make_lockfile(
            '"a@npm:1.0.0":\n'
            "  version: 1.0.0\n"
            '  resolution: "a@npm:1.0.0"\n'
            "  dependencies: ms\n"
        )
        with pytest.raises(LockfileSyntaxError):
            parse_lockfile(text)

    def test_non_boolean_meta_flag(self, make_lockfile) -> None:
        text = make_lockfile(
            '"a@npm:1.0.0":\n'
            "  version: 1.0.0\n"
            '  resolution: "a@npm:1.0.0"\n'
            "  dependenciesMeta:\n"
            "    ms:\n"
            "      optional: maybe\n"
        )
        with pytest.raises(FormatError):
            parse_lockfile(text)

    def test_inconsistent_property_indentation(self, make_lockfile) -> None:
        text = make_lockfile(
            '"a@npm:1.0.0":\n'
            "  version: 1.0.0\n"
            '   resolution: "a@npm:1.0.0"\n'
        )
        with pytest.raises(LockfileSyntaxError):
            parse_lockfile(text)

    def test_error_message_includes_offset(self) -> None:
        with pytest.raises(LockfileSyntaxError, match="at offset 0"):
            parse_lockfile("not a lockfile")

    def test_backslash_before_line_break_leaves_quote_unterminated(self, make_lockfile) -> None:
        text = make_lockfile(
            '"a@npm:1.0.0":\n'
            "  version: 1.0.0\n"
            '  checksum: "abc\\\n'
            '  resolution: a"\n'
        )
        with pytest.raises(LockfileSyntaxError) as excinfo:
            parse_lockfile(text)
        assert excinfo.value.offset == text.index('"abc')

    def test_entry_header_at_end_of_input(self, make_lockfile) -> None:
        with pytest.raises(TruncatedInputError):
            parse_lockfile(make_lockfile('"a@npm:1.0.0":'))
