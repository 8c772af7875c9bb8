"""End-to-end checks of the command-line entry point (local-only mode)."""

from trackkeeper import main as cli
from trackkeeper.stores import FileTrackStore

GPX = """<gpx><trk><name>Zigzag</name><trkseg>
<trkpt lat="41.0000" lon="2.0000"/><trkpt lat="41.0010" lon="2.00002"/>
<trkpt lat="41.0020" lon="1.99998"/><trkpt lat="41.0030" lon="2.0000"/>
</trkseg></trk></gpx>"""


def _run(tmp_path, *args):
    return cli.main(["--data-dir", str(tmp_path / "data"), "--remote-url", "", *args])


def test_import_list_show_delete(tmp_path, capsys) -> None:
    source = tmp_path / "zigzag.gpx"
    source.write_text(GPX, encoding="utf-8")
    assert _run(tmp_path, "import", str(source)) == 0
    assert "1 track(s) imported" in capsys.readouterr().out

    store = FileTrackStore(tmp_path / "data")
    track_id = store.get_all()[0].id

    assert _run(tmp_path, "list") == 0
    out = capsys.readouterr().out
    assert track_id in out
    assert "[local]" in out

    assert _run(tmp_path, "show", track_id) == 0
    assert "Zigzag" in capsys.readouterr().out

    assert _run(tmp_path, "simplify", track_id, "--level", "strong") == 0
    assert "Removed 2 point(s)" in capsys.readouterr().out
    assert len(store.get(track_id).points) == 2

    assert _run(tmp_path, "delete", track_id) == 0
    assert store.get(track_id) is None


def test_import_failure_sets_exit_code(tmp_path, capsys) -> None:
    bad = tmp_path / "notes.txt"
    bad.write_text("plain text", encoding="utf-8")
    assert _run(tmp_path, "import", str(bad)) == 1
    assert "FAILED" in capsys.readouterr().out


def test_sync_requires_remote(tmp_path, capsys) -> None:
    assert _run(tmp_path, "sync") == 1
    assert "TRACKKEEPER_REMOTE_URL" in capsys.readouterr().out


def test_show_missing_track(tmp_path, capsys) -> None:
    assert _run(tmp_path, "show", "absent") == 1
    assert "not found" in capsys.readouterr().out


def test_record_from_fix_file(tmp_path, capsys, caplog) -> None:
    fixes = tmp_path / "fixes.csv"
    fixes.write_text(
        "lat,lng,accuracy,altitude,timestamp\n"
        "# warm-up\n"
        "41.0000,2.0000,4.0,120,1700000000000\n"
        "41.0010,2.0005,,,1700000010000\n"
        "not-a-number,2.0\n"
        "41.0020,2.0010\n",
        encoding="utf-8",
    )
    assert _run(tmp_path, "record", str(fixes), "--name", "Evening walk") == 0
    assert "Recorded" in capsys.readouterr().out
    assert "Skipped 1 unusable fix row(s)" in caplog.text

    tracks = FileTrackStore(tmp_path / "data").get_all()
    assert [(t.name, len(t.points)) for t in tracks] == [("Evening walk", 3)]
    assert tracks[0].points[0].altitude == 120.0


def test_record_needs_enough_fixes(tmp_path, capsys) -> None:
    fixes = tmp_path / "fixes.csv"
    fixes.write_text("41.0,2.0\n", encoding="utf-8")
    assert _run(tmp_path, "record", str(fixes)) == 1
    assert "Not enough fixes" in capsys.readouterr().out
    assert FileTrackStore(tmp_path / "data").get_all() == []


def test_record_missing_fix_file(tmp_path, capsys) -> None:
    assert _run(tmp_path, "record", str(tmp_path / "absent.csv")) == 1
    assert "Cannot read" in capsys.readouterr().out


def test_delete_leaves_journal_outside_track_listing(tmp_path, capsys) -> None:
    source = tmp_path / "zigzag.gpx"
    source.write_text(GPX, encoding="utf-8")
    _run(tmp_path, "import", str(source))
    assert (tmp_path / "data" / cli.JOURNAL_DIRNAME).is_dir()
    track_id = FileTrackStore(tmp_path / "data").get_all()[0].id
    capsys.readouterr()
    assert _run(tmp_path, "delete", track_id) == 0
    assert _run(tmp_path, "list") == 0
    assert "No tracks" in capsys.readouterr().out
