"""Tests for the command-line front end."""

import json

import pytest

from pdbgeom.cli import PDBGeometryCLI, main_cli


@pytest.fixture
def dipeptide_file(tmp_path, dipeptide_pdb):
    path = tmp_path / "dipeptide.pdb"
    path.write_text(dipeptide_pdb)
    return str(path)


class TestParseArguments:
    def test_defaults(self, dipeptide_file):
        args = PDBGeometryCLI().parse_arguments(["geometry", dipeptide_file])
        assert args['command'] == 'geometry'
        assert args['display_mode'] == 'ball-and-stick'
        assert args['debug'] is False
        assert args['config'] == {}

    def test_json_parameters(self, dipeptide_file):
        args = PDBGeometryCLI().parse_arguments(
            ["--json", '{"mode": "surface", "seed": 4}', "geometry", dipeptide_file])
        assert args['display_mode'] == 'surface'
        assert args['config'] == {'seed': 4}

    def test_command_line_wins_over_json(self, dipeptide_file):
        args = PDBGeometryCLI().parse_arguments(
            ["-j", '{"mode": "surface"}', "geometry", dipeptide_file, "--mode", "ribbon"])
        assert args['display_mode'] == 'ribbon'

    def test_max_atoms_and_progress_reach_config(self, dipeptide_file):
        args = PDBGeometryCLI().parse_arguments(["--progress", "geometry", dipeptide_file, "--max-atoms", "5"])
        assert args['config'] == {'max_atoms': 5, 'show_progress': True}


class TestRun:
    def test_parse(self, dipeptide_file):
        assert main_cli(["parse", dipeptide_file, "--atom-summary", "3"]) == 0

    def test_geometry_writes_json(self, dipeptide_file, tmp_path):
        output = tmp_path / "ribbon.json"
        assert main_cli(["geometry", dipeptide_file, "--mode", "ribbon", "-o", str(output)]) == 0
        payload = json.loads(output.read_text())
        assert payload['mode'] == 'ribbon'
        assert payload['scale'] == 0.1
        assert payload['metadata']['atoms'] == 9

    def test_scale_option(self, dipeptide_file, tmp_path):
        output = tmp_path / "atoms.json"
        assert main_cli(["geometry", dipeptide_file, "--scale", "1.0", "-o", str(output)]) == 0
        payload = json.loads(output.read_text())
        assert payload['atoms'][0]['position'] == pytest.approx([-1.458, 0.0, 0.0])

    def test_missing_file(self, tmp_path):
        assert main_cli(["parse", str(tmp_path / "missing.pdb")]) == 1

    def test_file_without_atoms(self, tmp_path):
        path = tmp_path / "empty.pdb"
        path.write_text("HEADER    NOTHING\nEND\n")
        assert main_cli(["geometry", str(path)]) == 1

    def test_missing_model(self, dipeptide_file):
        assert main_cli(["geometry", dipeptide_file, "--model", "4"]) == 1

    def test_invalid_json(self, dipeptide_file):
        assert main_cli(["--json", "{broken", "parse", dipeptide_file]) == 1

    def test_unknown_config_key(self, dipeptide_file):
        assert main_cli(["--json", '{"bond_treshold": 2.0}', "parse", dipeptide_file]) == 1

    def test_unknown_mode_from_json(self, dipeptide_file):
        assert main_cli(["--json", '{"mode": "cartoon"}', "geometry", dipeptide_file]) == 1

    def test_no_command(self, capsys):
        assert main_cli([]) == 1
        assert "Usage Instructions" in capsys.readouterr().out
