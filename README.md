# geigerlens

A library for describing how much `unsafe` code a Cargo package and its
dependencies contain, and for turning those numbers into reports.

geigerlens works from data you already have: the JSON printed by
`cargo metadata`, and safe/unsafe counts you have gathered yourself. It gives
you:

- **Report models** (`geigerlens.report`): `PackageId`, `Count`,
  `CounterBlock`, `UnsafeInfo`, `PackageInfo`, `ReportEntry`,
  `QuickReportEntry`, `SafetyReport` and `QuickSafetyReport`, each with
  `to_dict`/`from_dict`; the two reports also have `to_json`/`from_json`.
  Packages and sets are always written in sorted order.
- **Package sources** (`geigerlens.sources`): `handle_source_repr` turns a
  `registry+...` or `git+...` source string into a `RegistrySource` or
  `GitSource`; `handle_path_source` turns a `(... path+file://...)` package id
  into a `PathSource`.
- **Metadata mapping** (`geigerlens.metadata`, `geigerlens.krates`): load
  `cargo metadata` output with `Metadata.from_json`, find the root package,
  match dependency requirements with `VersionReq`, list a package's resolved
  dependencies with `Metadata.deps_not_replaced`, and resolve package specs
  such as `"serde:1.0.100"` with `Krates.query_resolve`.
- **Dependency graphs** (`geigerlens.graph`): `build_graph` walks the
  dependencies of a root package into a `Graph`, honouring build/dev
  dependency selection (`geigerlens.extra_deps.ExtraDeps`) and target
  platforms, including `cfg(...)` expressions matched against a list of `Cfg`
  values you supply.
- **Formatting**: `geigerlens.pattern.Pattern` (`{p}`, `{l}` and `{r}`
  placeholders for package lines), `geigerlens.print_config` (`PrintConfig`
  and `colorize`, which styles text by `CrateDetectionStatus`),
  `geigerlens.emoji_symbols.EmojiSymbols`, `geigerlens.counts.TotalPackageCounts`,
  and the fixed-width rows in `geigerlens.table_rows` (`table_row`,
  `table_footer`, `table_row_empty`) and `geigerlens.table`.
- **Arguments** (`geigerlens.args`): `Args.parse_args` parses the usual option
  set (`--all`, `--output-format`, `--update-readme`, `-v`/`-vv`,
  `--features`, and so on) into an `Args` value. Asking for `--update-readme`
  switches the output format to `GitHubMarkdown`.

## Counting unsafe usage

```python
from geigerlens.report import Count, CounterBlock

functions = Count()
functions.count(True)    # one unsafe function
functions.count(False)   # one safe function

used = CounterBlock(functions=functions)
total = used + CounterBlock()
print(total.has_unsafe())  # True
```

## Reading and writing reports

```python
from geigerlens.report import SafetyReport

with open("report.json", encoding="utf-8") as handle:
    report = SafetyReport.from_json(handle.read())

for package_id in sorted(report.packages):
    entry = report.packages[package_id]
    print(package_id.name, entry.unsafety.used.has_unsafe())

text = report.to_json()
```

## Working with `cargo metadata` output

```python
from geigerlens.krates import Krates
from geigerlens.metadata import Metadata

with open("metadata.json", encoding="utf-8") as handle:
    metadata = Metadata.from_json(handle.read())

root = metadata.root_package()   # None for a virtual workspace manifest
krates = Krates(metadata)

print(krates.name_and_version(root.id))
print(metadata.geiger_package_id(root.id))
print(krates.query_resolve("semver"))
```

## Rendering package lines and table rows

```python
from geigerlens.format import OutputFormat
from geigerlens.pattern import Pattern
from geigerlens.report import CounterBlock
from geigerlens.table_rows import table_row

pattern = Pattern.try_build("{p} ({l})")
line = pattern.display(krates, root.id)   # e.g. "mycrate 0.1.0 (MIT)"
row = table_row(CounterBlock(), CounterBlock(), OutputFormat.ASCII)
```

An unknown placeholder such as `{x}`, or an unbalanced brace, makes
`Pattern.try_build` raise `FormatError`.

## Choosing which dependencies to follow

```python
from geigerlens.extra_deps import ExtraDeps
from geigerlens.report import DependencyKind

ExtraDeps.BUILD.allows(DependencyKind.BUILD)        # True
ExtraDeps.BUILD.allows(DependencyKind.DEVELOPMENT)  # False
ExtraDeps.NO_MORE.allows(DependencyKind.NORMAL)     # True
```

## What geigerlens does not do

- It has no command-line program. `Args.parse_args` only parses options; no
  function acts on them.
- It does not run `cargo` or `rustc`. You supply the `cargo metadata` JSON and
  the list of active `Cfg` values yourself.
- It does not read source files or count `unsafe` items; the counts in a
  report come from you.
- It does not write README sections, print the dependency tree, or assemble a
  full report table from a tree; it provides the pieces such output is made of.

## Requirements

Python 3.10 or later. The only runtime dependency is `semver`.