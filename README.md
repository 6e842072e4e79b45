# bufcore

Building blocks for tools that work with Protobuf sources and images.

## What is in the package

- **`bufcore.inputref`** parses input references such as
  `path/to/file.tar.gz#strip_components=1` or `repo.git#branch=main` into an
  `InputRef` holding a `Format`, a path, a git branch and a strip-components
  count. A `Format` is a source (`dir`, `tar`, `targz`, `git`) or an image
  (`bin`, `bingz`, `json`, `jsongz`); `all_formats_to_string()`,
  `source_formats_to_string()` and `image_formats_to_string()` list them.
- **`bufcore.configoverride`** has `ConfigOverrideParser`, which reads a
  configuration override given inline or as a path ending in `.json` or
  `.yaml`, and hands the data to a provider object with a
  `get_config_for_data(data)` method.
- **`bufcore.analysis`** holds `Annotation`, a message about a location in a
  file, with `sort_annotations`, `print_annotations` (text or JSON lines) and
  `annotations_to_user_error`.
- **`bufcore.errs`** separates errors meant for the user (`UserError`,
  `is_user_error`) from system errors.
- **`bufcore.bytepool`** is a pool of reusable byte buffers (`SegList`,
  `Bytes`) grouped into size classes, with per-class `ListStats` for spotting
  buffers that were never recycled.
- **`bufcore.encodingutil`** decodes JSON or YAML strictly into a known set of
  fields, and `get_json_string_or_string_value` turns a raw config value into
  a string.
- **`bufcore.osutil`** treats `-` as stdin or stdout and knows the platform's
  null device (`dev_null`, `open_for_read`, `open_for_write`).
- **`bufcore.logutil`** builds a logger with a level of `debug`, `info`,
  `warn` or `error` and a format of `text`, `color` or `json`, and `timed`
  logs how long a block took.
- **`bufcore.diff`** produces a unified diff of two byte strings by calling
  the system `diff` tool.
- **`bufcore.cli`** holds `RunEnv` and `ExecEnv`, the environment a program
  runs in, and `is_format_json` for `text`/`json` format options.
- **`bufcore.plugin`** runs a protoc code generator plugin handler: it reads
  a `CodeGeneratorRequest` from stdin and writes a `CodeGeneratorResponse` to
  stdout.

## Parsing an input reference

```python
from bufcore.inputref import InputRefParser
from bufcore.errs import UserError

parser = InputRefParser("--input")
ref = parser.parse_input_ref("protos/archive.tar.gz#strip_components=1", False, False)
print(ref.format, ref.path, ref.strip_components)
# targz protos/archive.tar.gz 1

try:
    parser.parse_input_ref("protos/archive.gz", False, False)
except UserError as err:
    print(err)  # --input: path "protos/archive.gz" had .gz extension with unknown format
```

The second and third arguments restrict the result to source formats or to
image formats; asking for both at once raises `ValueError`.

## Working with annotations

```python
import sys
from bufcore.analysis import Annotation, sort_annotations, print_annotations

annotations = [
    Annotation(filename="b.proto", start_line=3, type="FIELD_LOWER_SNAKE_CASE",
               message="Field name should be lower_snake_case."),
    Annotation(filename="a.proto", start_line=1, type="PACKAGE_DEFINED",
               message="Files must have a package defined."),
]
sort_annotations(annotations)
print_annotations(sys.stdout, annotations, False)
# a.proto:1:1:Files must have a package defined.
# b.proto:3:1:Field name should be lower_snake_case.
```

Pass `True` as the last argument to print one JSON object per line instead.

## Pooled byte buffers

```python
from bufcore.bytepool import SegList, total_unrecycled

seg_list = SegList(list_sizes=[8, 16])
buf = seg_list.get(16)
buf.copy_from(b"hello", 0)
assert len(buf) == 5
buf.recycle()
assert total_unrecycled(seg_list) == 0
```

Using a buffer after it has been recycled, or recycling it twice, raises
`PoolMisuseError`. `new_no_pool_seg_list()` gives a `SegList` that allocates
every buffer fresh.

## Running a plugin handler

```python
import io
from google.protobuf.compiler import plugin_pb2
from bufcore.cli import RunEnv
from bufcore.errs import UserError
from bufcore.plugin import run

def handler(stderr, request):
    raise UserError("nothing to generate")

request = plugin_pb2.CodeGeneratorRequest(file_to_generate=["a.proto"])
stdout = io.BytesIO()
code = run(handler, RunEnv(stdin=io.BytesIO(request.SerializeToString()),
                           stdout=stdout, stderr=io.StringIO()))
response = plugin_pb2.CodeGeneratorResponse.FromString(stdout.getvalue())
assert code == 0 and response.error == "nothing to generate"
```

User errors go into the response's `error` field; any other error is written
to stderr and `run` returns 1. `bufcore.plugin.main(handler)` does the same
with the process's own streams and exits with the code.

## What the package does not do

The package has no command-line tool of its own and no runner for a tree of
subcommands with flags. It does not compile `.proto` files, build images,
read tarballs or git repositories, or run lint and breaking-change checks:
`InputRefParser` only says where an input is and what format it has, and
`ConfigOverrideParser` relies on a provider you pass in to turn data into a
configuration.