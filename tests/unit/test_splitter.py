from __future__ import annotations

import asyncio
import math
from pathlib import Path
from typing import List

import pytest

from file.matcher import PredicateFileMatcher, RegexFileMatcher, glob_predicate
from file.splitter import DirectorySplitter, SplitConfig, cleanup, split


def _contents(directory: Path) -> List[str]:
    return sorted(p.name for p in directory.iterdir())


def test_split_config_defaults_and_builders(tmp_path: Path) -> None:
    config = SplitConfig(tmp_path, 3)

    assert config.output_dir is None
    assert config.resolved_output_dir == tmp_path
    assert config.dir_name(0) == "part_0"
    assert config.regex_patterns == ()

    renamed = config.with_output_dir(tmp_path / "out").with_naming("batch-{}-", "done")
    assert renamed is not config
    assert renamed.resolved_output_dir == tmp_path / "out"
    assert renamed.target_dirs() == [tmp_path / "out" / f"batch-{i}-done" for i in range(3)]
    assert config.target_dirs()[0] == tmp_path / "part_0"

    with_patterns = config.with_regex_patterns([r"\.meta$"])
    assert with_patterns.regex_patterns[0].pattern == r"\.meta$"


@pytest.mark.parametrize("num_dirs", [0, -1])
def test_split_config_rejects_invalid_dir_count(tmp_path: Path, num_dirs: int) -> None:
    with pytest.raises(ValueError, match="num_dirs"):
        SplitConfig(tmp_path, num_dirs)
    assert list(tmp_path.iterdir()) == []


def test_split_config_requires_index_placeholder(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="prefix_format"):
        SplitConfig(tmp_path, 2).with_naming("fixed", "")


def test_split_groups_logs_with_their_meta_files(make_tree) -> None:
    source = make_tree(["a.log", "a.meta", "b.log"])
    config = SplitConfig(source, 2).with_regex_patterns([r".*\.meta$"])
    matcher = RegexFileMatcher(glob_predicate("*.log"), config.regex_patterns)

    created = asyncio.run(split(config, matcher))

    assert created == [source / "part_0", source / "part_1"]
    layouts = sorted(_contents(d) for d in created)
    assert layouts == [["a.log", "a.meta"], ["b.log"]]
    assert (source / "a.log").exists()


def test_discover_builds_one_group_per_representative(make_tree) -> None:
    source = make_tree(["a.log", "a.meta", "b.log", "sub/c.log", "sub/c.meta", "README"])
    splitter = DirectorySplitter.from_config(
        SplitConfig(source, 2, regex_patterns=(r"\.meta$",)),
        glob_predicate("*.log"),
    )

    groups = asyncio.run(splitter.discover())

    assert set(groups) == {source / "a.log", source / "b.log", source / "sub" / "c.log"}
    assert groups[source / "a.log"] == [source / "a.log", source / "a.meta"]
    assert groups[source / "b.log"] == [source / "b.log"]
    assert groups[source / "sub" / "c.log"] == [source / "sub" / "c.log", source / "sub" / "c.meta"]


def test_discover_never_places_a_path_in_two_groups(make_tree) -> None:
    source = make_tree(["a.log", "b.log", "shared.meta", "x.log"])
    matcher = RegexFileMatcher(glob_predicate("*.log"), [r"\.meta$"], same_stem=False)

    groups = asyncio.run(DirectorySplitter(SplitConfig(source, 2), matcher).discover())

    members = [m for group in groups.values() for m in group]
    assert len(members) == len(set(members)) == 4
    assert sum(1 for group in groups.values() if source / "shared.meta" in group) == 1


def test_discover_skips_files_without_extension(make_tree) -> None:
    source = make_tree(["Makefile", "a.log"])
    matcher = PredicateFileMatcher(lambda p: True)

    groups = asyncio.run(DirectorySplitter(SplitConfig(source, 1), matcher).discover())

    assert list(groups) == [source / "a.log"]


def test_discover_ignores_pruned_directories(make_tree) -> None:
    source = make_tree(["a.log", ".git/b.log", "target/c.log", ".cache/d.log"])
    matcher = RegexFileMatcher(glob_predicate("*.log"))

    groups = asyncio.run(DirectorySplitter(SplitConfig(source, 1), matcher).discover())

    assert list(groups) == [source / "a.log"]


@pytest.mark.parametrize("num_groups, num_dirs", [(7, 3), (2, 5), (6, 2), (1, 1)])
def test_distribution_is_balanced(make_tree, tmp_path: Path, num_groups: int, num_dirs: int) -> None:
    source = make_tree([f"item{i}.dat" for i in range(num_groups)])
    config = SplitConfig(source, num_dirs).with_output_dir(tmp_path / "out")

    created = asyncio.run(split(config, RegexFileMatcher(glob_predicate("*.dat"))))

    counts = [len(list(d.iterdir())) for d in created]
    assert sum(counts) == num_groups
    low, high = num_groups // num_dirs, math.ceil(num_groups / num_dirs)
    assert all(low <= c <= high for c in counts)


def test_split_copies_every_group_member(make_tree, tmp_path: Path) -> None:
    source = make_tree(
        ["one.raw", "one.xmp", "two.raw", "two.xmp", "two.jpg", "three.raw", "notes.txt"]
    )
    config = SplitConfig(source, 2, output_dir=tmp_path / "out", regex_patterns=(r"\.(xmp|jpg)$",))
    splitter = DirectorySplitter.from_config(config, glob_predicate("*.raw"))

    groups = asyncio.run(splitter.discover())
    created = asyncio.run(splitter.split())

    placed = sum(len(list(d.iterdir())) for d in created)
    assert placed == sum(len(members) for members in groups.values()) == 6
    assert not any((d / "notes.txt").exists() for d in created)
    assert (source / "one.raw").exists()


def test_split_refuses_to_overwrite_same_named_files(make_tree, tmp_path: Path) -> None:
    source = make_tree(["x/a.log", "y/a.log"])
    out = tmp_path / "out"

    with pytest.raises(FileExistsError) as excinfo:
        asyncio.run(split(SplitConfig(source, 1, output_dir=out), RegexFileMatcher(glob_predicate("*.log"))))

    message = str(excinfo.value)
    assert str(source / "x" / "a.log") in message
    assert str(source / "y" / "a.log") in message
    assert _contents(out / "part_0") == ["a.log"]


def test_split_places_same_named_files_in_different_directories(make_tree, tmp_path: Path) -> None:
    source = make_tree(["x/a.log", "y/a.log"])

    created = asyncio.run(
        split(SplitConfig(source, 2, output_dir=tmp_path / "out"), RegexFileMatcher(glob_predicate("*.log")))
    )

    assert [_contents(d) for d in created] == [["a.log"], ["a.log"]]
    assert sorted((d / "a.log").read_text(encoding="utf-8") for d in created) == ["x/a.log", "y/a.log"]


def test_split_with_progress_bar(make_tree, tmp_path: Path) -> None:
    source = make_tree(["a.log", "b.log", "c.log"])
    splitter = DirectorySplitter(
        SplitConfig(source, 3, output_dir=tmp_path / "out"),
        RegexFileMatcher(glob_predicate("*.log")),
        show_progress=True,
    )

    created = asyncio.run(splitter.split())

    assert [len(_contents(d)) for d in created] == [1, 1, 1]


def test_split_reuses_existing_target_directories(make_tree, tmp_path: Path) -> None:
    source = make_tree(["a.log"])
    out = tmp_path / "out"
    (out / "part_0").mkdir(parents=True)
    config = SplitConfig(source, 2, output_dir=out)

    created = asyncio.run(split(config, RegexFileMatcher(glob_predicate("*.log"))))

    assert [d.name for d in created] == ["part_0", "part_1"]
    assert all(d.is_dir() for d in created)


def test_split_with_no_matches_still_creates_targets(make_tree) -> None:
    source = make_tree(["a.txt"])

    created = asyncio.run(split(SplitConfig(source, 3), RegexFileMatcher(glob_predicate("*.log"))))

    assert len(created) == 3
    assert all(d.is_dir() and _contents(d) == [] for d in created)


def test_split_propagates_matcher_errors_without_creating_dirs(make_tree) -> None:
    source = make_tree(["a.log", "b.log"])

    def is_match(path: Path) -> bool:
        raise PermissionError(f"denied: {path.name}")

    with pytest.raises(PermissionError):
        asyncio.run(split(SplitConfig(source, 2), PredicateFileMatcher(is_match)))

    assert not (source / "part_0").exists()


def test_split_missing_source_fails(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        asyncio.run(split(SplitConfig(tmp_path / "nope", 2), RegexFileMatcher(glob_predicate("*"))))


def test_split_stops_at_first_copy_failure(make_tree, tmp_path: Path) -> None:
    source = make_tree(["a.log"])
    matcher = PredicateFileMatcher(
        glob_predicate("*.log"),
        lambda p: [p.parent / "vanished.meta"],
    )

    with pytest.raises(FileNotFoundError):
        asyncio.run(split(SplitConfig(source, 1, output_dir=tmp_path / "out"), matcher))

    assert (tmp_path / "out" / "part_0" / "a.log").exists()


def test_cleanup_removes_created_directories(make_tree, tmp_path: Path) -> None:
    source = make_tree(["a.log", "b.log", "c.log"])
    splitter = DirectorySplitter(
        SplitConfig(source, 2, output_dir=tmp_path / "out"),
        RegexFileMatcher(glob_predicate("*.log")),
    )
    created = asyncio.run(splitter.split())

    asyncio.run(splitter.cleanup(created))

    assert not any(d.exists() for d in created)
    assert sorted(p.name for p in source.iterdir()) == ["a.log", "b.log", "c.log"]


def test_cleanup_twice_fails_with_not_found(make_tree, tmp_path: Path) -> None:
    source = make_tree(["a.log"])
    created = asyncio.run(
        split(SplitConfig(source, 2, output_dir=tmp_path / "out"), RegexFileMatcher(glob_predicate("*.log")))
    )
    asyncio.run(cleanup(created))

    with pytest.raises(FileNotFoundError):
        asyncio.run(cleanup(created))


def test_cleanup_attempts_every_directory_before_failing(tmp_path: Path) -> None:
    present = tmp_path / "present"
    (present / "nested").mkdir(parents=True)

    with pytest.raises(FileNotFoundError):
        asyncio.run(cleanup([tmp_path / "missing", present]))

    assert not present.exists()
