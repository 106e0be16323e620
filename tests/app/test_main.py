import argparse
import json
import pickle

import pytest

from main import parse_platform, run
from platform_router.domain.entities.osm import RelationID, WayID
from platform_router.io.snapshot import snapshot_to_dict


def test_parse_platform():
    assert parse_platform("way/12") == WayID(12)
    assert parse_platform("relation/7") == RelationID(7)
    for bad in ("node/1", "way/x", "12"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_platform(bad)


def test_run_lists_platforms_and_routes(station, tmp_path, capsys):
    path = tmp_path / "station.json"
    path.write_text(json.dumps(snapshot_to_dict(station)), encoding="utf-8")
    code = run(
        [str(path), "--from", "way/100", "--from-service", "1000", "--to", "way/300", "--to-service", "2000"]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "Platform Station (way/100) has services:" in out
    assert "20.0% along source platform" in out
    assert "33.3% along destination platform" in out


def test_run_groups_by_mode_from_pickle(station, tmp_path, capsys):
    path = tmp_path / "station.pickle"
    path.write_bytes(pickle.dumps(station))
    assert run([str(path), "--by-mode", "--threads", "2"]) == 0
    out = capsys.readouterr().out
    assert "Subway:\n  U1 to North from way/100" in out
    assert "Tram:\n  M10 to South from way/300" in out


def test_run_reports_routing_failure(station, tmp_path, capsys):
    data = snapshot_to_dict(station)
    data["ways"] = [w for w in data["ways"] if w["id"] != 200]
    path = tmp_path / "no_footway.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    failures = tmp_path / "failures.jsonl"
    code = run(
        [str(path), "--from", "way/100", "--from-service", "1000", "--to", "way/300", "--to-service", "2000",
         "--failures", str(failures)]
    )
    assert code == 1
    assert "No result: no route between 0 sources and 0 targets" in capsys.readouterr().err
    (row,) = [json.loads(line) for line in failures.read_text(encoding="utf-8").splitlines()]
    assert (row["name"], row["reason"]) == ("RouteFailed", "unreachable")


def test_run_reports_unknown_service(station, tmp_path, capsys):
    path = tmp_path / "station.json"
    path.write_text(json.dumps(snapshot_to_dict(station)), encoding="utf-8")
    code = run(
        [str(path), "--from", "way/100", "--from-service", "999", "--to", "way/300", "--to-service", "2000"]
    )
    assert code == 1
    assert "No result: unknown element relation/999" in capsys.readouterr().err
