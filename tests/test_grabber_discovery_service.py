"""Tests for grabber discovery output parsing."""
from epggrab.services.grab_types import GrabberDescriptor
from epggrab.services.grabber_discovery_service import discover_grabbers, parse_grabber_list


def test_path_and_label_records():
    descriptors = parse_grabber_list(b"/bin/a|Grabber A\n/bin/b\n")

    assert descriptors == [
        GrabberDescriptor(id="/bin/a", path="/bin/a", name="XMLTV: Grabber A"),
        GrabberDescriptor(id="/bin/b", path="/bin/b", name="XMLTV: /bin/b"),
    ]


def test_nul_terminated_records_and_missing_final_newline():
    descriptors = parse_grabber_list(b"/bin/a|A\0/bin/b|B\n/bin/c|C")
    assert [descriptor.id for descriptor in descriptors] == ["/bin/a", "/bin/b", "/bin/c"]
    assert descriptors[2].name == "XMLTV: C"


def test_blank_records_are_skipped():
    assert parse_grabber_list("\n\n/bin/a\n\n") == [
        GrabberDescriptor(id="/bin/a", path="/bin/a", name="XMLTV: /bin/a")
    ]


def test_empty_label_falls_back_to_path():
    assert parse_grabber_list("/bin/a|\n")[0].name == "XMLTV: /bin/a"


def test_path_kept_verbatim():
    descriptor = parse_grabber_list(b"/bin/a \n")[0]
    assert descriptor.path == "/bin/a "
    assert descriptor.id == "/bin/a "


def test_empty_output():
    assert parse_grabber_list(b"") == []


def test_discover_runs_command_without_arguments():
    calls = []

    def runner(command):
        calls.append(command)
        return b"/usr/bin/tv_grab_uk|United Kingdom\n"

    descriptors = discover_grabbers("/usr/bin/tv_find_grabbers", runner=runner)

    assert calls == ["/usr/bin/tv_find_grabbers"]
    assert descriptors[0].name == "XMLTV: United Kingdom"


def test_discover_failure_yields_nothing(caplog):
    assert discover_grabbers("/missing", runner=lambda command: b"") == []
    assert "/missing failed" in caplog.text
