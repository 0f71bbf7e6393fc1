import io
import threading
from datetime import datetime

import pytest

from devlog.colors import Color
from devlog.handler import DevLogHandler, HandlerOptions
from devlog.levels import DEBUG, ERROR, INFO, WARN, LevelVar
from devlog.record import Record, Source
from devlog.theme import default_theme
from devlog.values import group, int64, string

FIXED_TIME = datetime(2024, 1, 2, 13, 4, 5, 678_901)
THEME = default_theme()


def make_record(message: str = "started", *args, level: int = INFO) -> Record:
    record = Record(time=FIXED_TIME, level=level, message=message)
    record.add(*args)
    return record


def render(handler: DevLogHandler, record: Record) -> str:
    return handler.render(record).decode("utf-8")


def test_enabled_respects_minimum_level() -> None:
    handler = DevLogHandler(io.BytesIO(), HandlerOptions(level=WARN))
    assert not handler.enabled(DEBUG)
    assert not handler.enabled(INFO)
    assert handler.enabled(WARN)
    assert handler.enabled(ERROR)


def test_default_minimum_level_is_info(handler: DevLogHandler) -> None:
    assert not handler.enabled(DEBUG)
    assert handler.enabled(INFO)


def test_options_accept_level_names() -> None:
    assert HandlerOptions(level="debug").level == DEBUG


def test_level_var_changes_apply_immediately() -> None:
    var = LevelVar(ERROR)
    handler = DevLogHandler(io.BytesIO(), HandlerOptions(level=var))
    assert not handler.enabled(INFO)
    var.set(INFO)
    assert handler.enabled(INFO)


def test_end_to_end_info_record(handler: DevLogHandler, sink: io.BytesIO) -> None:
    handler.handle(make_record("started", "service", "api"))
    expected = (
        f"{THEME.time.render('[13:04:05.678]')} "
        f"{THEME.info.render(' INFO  ')} "
        f"{THEME.string.render('msg')}=started "
        f"{THEME.string.render('service')}=api "
        "\n"
    )
    assert sink.getvalue().decode("utf-8") == expected


def test_output_is_a_single_line(handler: DevLogHandler) -> None:
    out = render(handler, make_record("started", "a", 1))
    assert out.endswith("\n")
    assert out.count("\n") == 1


def test_zero_time_is_omitted(handler: DevLogHandler) -> None:
    out = render(handler, Record(time=None, level=INFO, message="m"))
    assert out.startswith(THEME.info.render(" INFO  "))


def test_prefix_is_rendered_first() -> None:
    handler = DevLogHandler(io.BytesIO(), HandlerOptions(prefix="api"))
    out = render(handler, make_record())
    assert out.startswith(f"{THEME.prefix.render('api')} {THEME.time.render('[13:04:05.678]')}")


def test_source_location_only_when_enabled() -> None:
    record = make_record()
    record.source = Source(function="main", file="/srv/app.py", line=12)
    label = THEME.source_file.render(" /srv/app.py:12 ")

    plain = DevLogHandler(io.BytesIO())
    assert label not in render(plain, record)

    with_source = DevLogHandler(io.BytesIO(), HandlerOptions(add_source=True))
    out = render(with_source, record)
    assert f"{THEME.info.render(' INFO  ')} {label} {THEME.string.render('msg')}" in out


def test_record_now_captures_caller_source() -> None:
    record = Record.now(INFO, "here", with_source=True)
    assert record.source is not None
    assert record.source.file == __file__
    assert record.source.function == "test_record_now_captures_caller_source"


def test_with_context_renders_in_call_order(handler: DevLogHandler) -> None:
    derived = (
        handler.with_attrs([string("env", "prod")])
        .with_group("req")
        .with_attrs([string("id", "42")])
    )
    out = render(derived, make_record("done", "status", 200))
    env = f"{THEME.string.render('env')}=prod "
    header = "    req:\n"
    ident = f"{THEME.string.render('id')}=42 "
    status = f"{THEME.int.render('status')}=200 "
    assert f"{env}{header}{ident}{status}\n" in out


def test_empty_derivations_return_same_handler(handler: DevLogHandler) -> None:
    assert handler.with_group("") is handler
    assert handler.with_attrs([]) is handler
    record = make_record("same", "a", "b")
    assert render(handler.with_group("").with_attrs([]), record) == render(handler, record)


def test_derivation_does_not_mutate_parent(handler: DevLogHandler) -> None:
    child = handler.with_attrs([string("a", "1")])
    grandchild = child.with_group("g")
    sibling = child.with_attrs([string("b", "2")])
    assert handler.frames == ()
    assert len(child.frames) == 1
    assert len(grandchild.frames) == 2
    assert len(sibling.frames) == 2
    assert sibling.frames[1].attrs == (string("b", "2"),)


def test_trailing_groups_dropped_when_record_has_no_attrs(handler: DevLogHandler) -> None:
    derived = handler.with_attrs([string("env", "prod")]).with_group("a").with_group("b")
    out = render(derived, make_record("bare"))
    assert "a:" not in out
    assert "b:" not in out
    assert "env" in out


def test_trailing_groups_kept_when_record_has_attrs(handler: DevLogHandler) -> None:
    derived = handler.with_group("a").with_group("b")
    out = render(derived, make_record("full", "k", "v"))
    assert "    a:\n    b:\n" in out


def test_group_followed_by_attrs_is_never_dropped(handler: DevLogHandler) -> None:
    derived = handler.with_group("req").with_attrs([string("id", "42")]).with_group("tail")
    out = render(derived, make_record("bare"))
    assert "    req:\n" in out
    assert "tail:" not in out


def test_record_with_only_empty_group_counts_as_attribute_free(handler: DevLogHandler) -> None:
    record = make_record("bare", group("nothing"))
    assert record.num_attrs == 0
    assert "    g:\n" not in render(handler.with_group("g"), record)


def test_rendering_is_repeatable(handler: DevLogHandler) -> None:
    derived = handler.with_attrs([string("env", "prod")]).with_group("req")
    record = make_record("again", "a", 1, group("g", "x", True))
    assert derived.render(record) == derived.render(record)


def test_custom_theme_replaces_default() -> None:
    theme = default_theme().model_copy(update={"string": Color(fg=31, bg=47)})
    handler = DevLogHandler(io.BytesIO(), HandlerOptions(theme=theme))
    out = render(handler, make_record())
    assert "\033[31;47mmsg\033[0m=started" in out


def test_text_sinks_are_supported() -> None:
    sink = io.StringIO()
    DevLogHandler(sink).handle(make_record("text"))
    assert "=text " in sink.getvalue()


def test_sink_errors_propagate_unchanged() -> None:
    error = OSError("disk full")

    class BrokenSink:
        def write(self, data: bytes) -> int:
            raise error

    handler = DevLogHandler(BrokenSink())
    with pytest.raises(OSError) as excinfo:
        handler.handle(make_record())
    assert excinfo.value is error


def test_concurrent_writers_never_interleave_lines() -> None:
    class RecordingSink:
        def __init__(self) -> None:
            self.writes = []

        def write(self, data: bytes) -> int:
            self.writes.append(data)
            return len(data)

    sink = RecordingSink()
    root = DevLogHandler(sink)

    def worker(n: int) -> None:
        derived = root.with_attrs([int64("worker", n)])
        for i in range(50):
            derived.handle(make_record("tick", "i", i))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(sink.writes) == 400
    assert all(w.endswith(b"\n") and w.count(b"\n") == 1 for w in sink.writes)


def test_undecodable_filename_characters_are_escaped(handler: DevLogHandler) -> None:
    record = make_record("opened", string("path", "bad\udcffname"))
    out = handler.render(record)
    assert f"{THEME.string.render('path')}=bad\\udcffname ".encode("utf-8") in out


def test_undecodable_characters_reach_text_sinks() -> None:
    sink = io.StringIO()
    DevLogHandler(sink).handle(make_record("opened", string("path", "bad\udcffname")))
    assert "=bad\\udcffname " in sink.getvalue()


def test_duck_typed_text_writers_receive_str() -> None:
    class ConsoleWrapper:
        encoding = "utf-8"

        def __init__(self) -> None:
            self.chunks = []

        def write(self, data: str) -> int:
            assert isinstance(data, str)
            self.chunks.append(data)
            return len(data)

    wrapper = ConsoleWrapper()
    DevLogHandler(wrapper).handle(make_record("wrapped"))
    assert "=wrapped " in wrapper.chunks[0]


def test_text_mode_can_be_forced() -> None:
    class Writer:
        def __init__(self) -> None:
            self.chunks = []

        def write(self, data: str) -> int:
            assert isinstance(data, str)
            self.chunks.append(data)
            return len(data)

    writer = Writer()
    handler = DevLogHandler(writer, text=True)
    handler.with_attrs([string("env", "dev")]).handle(make_record("forced"))
    assert "=forced " in writer.chunks[0]
    assert "=dev " in writer.chunks[0]


def test_binary_mode_files_receive_bytes(tmp_path) -> None:
    path = tmp_path / "out.log"
    with path.open("wb") as raw:
        DevLogHandler(raw).handle(make_record("saved"))
    assert b"=saved " in path.read_bytes()
