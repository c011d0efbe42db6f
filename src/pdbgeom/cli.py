#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDB Geometry CLI Module

Provides the command-line interface for parsing structures and deriving
display geometry.
"""

import sys
import argparse
import json
import os
from typing import Any, Dict, List, Optional

from .config import GeometryConfig
from .core.representations import REPRESENTATIONS, derive_geometry
from .core.statistics import StructureStatistics
from .errors import ComputationCancelled, ConfigurationError, EmptyStructureError
from .io.parser import PDBParser
from .io.writer import GeometryWriter
from .models.structure import StructureFile
from .utils.logger import Logger


class PDBGeometryCLI:
    """
    Command-line interface for pdbgeom.

    Attributes:
        logger (Logger): Logger instance for debug logging
        config (GeometryConfig): Geometry parameters
        parser (PDBParser): PDB file parser
        writer (GeometryWriter): Geometry writer
    """
    def __init__(self):
        self.logger = None
        self.config = None
        self.parser = None
        self.writer = None

    def parse_arguments(self, args: List[str]) -> Dict[str, Any]:
        """
        Parse command-line arguments using argparse.

        JSON parameters (``--json``/``-j``, string or file path) are applied
        first; keys naming CLI options set those options and every other key
        is a geometry configuration override.  Explicit command-line values
        win over JSON values.

        Args:
            args (List[str]): Command-line arguments

        Returns:
            Dict[str, Any]: Parsed arguments; ``config`` holds configuration overrides

        Raises:
            ConfigurationError: If the JSON parameters cannot be read
        """
        default_values = {
            'debug': False,
            'command': None,
            'input_file': None,
            'output_file': None,
            'display_mode': 'ball-and-stick',
            'model': None,
            'max_atoms': None,
            'scale': None,
            'log_file': None,
            'progress': False,
            'atom_summary': 10,
            'config': {},
        }

        json_arg = None
        if '--json' in args or '-j' in args:
            json_idx = args.index('--json') if '--json' in args else args.index('-j')
            if json_idx + 1 < len(args):
                json_arg = args[json_idx + 1]
                args = args[:json_idx] + args[json_idx + 2:]

        if json_arg:
            if os.path.isfile(json_arg):
                with open(json_arg, 'r', encoding='utf-8') as f:
                    text = f.read()
            else:
                text = json_arg
            try:
                json_data = json.loads(text)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON string or file path: {json_arg}") from e
            if not isinstance(json_data, dict):
                raise ConfigurationError("JSON parameters must be an object")

            for key, value in json_data.items():
                if key == 'mode':
                    default_values['display_mode'] = value
                elif key in default_values and key != 'config':
                    default_values[key] = value
                else:
                    default_values['config'][key] = value

        parser = argparse.ArgumentParser(
            prog='pdbgeom',
            description='PDB Geometry - structure parsing and display geometry derivation',
            formatter_class=argparse.RawTextHelpFormatter
        )
        parser.add_argument('--debug', '-d', action='store_true', default=None, help='Enable debug mode')
        parser.add_argument('--log-file', help='Also write log lines to this file')
        parser.add_argument('--progress', action='store_true', default=None, help='Show progress bars')

        subparsers = parser.add_subparsers(dest='command', help='Operation mode')

        parse_parser = subparsers.add_parser('parse', help='Parse a PDB file and report its contents')
        parse_parser.add_argument('input_file', help='Input PDB file path')
        parse_parser.add_argument('--atom-summary', type=int, help='Number of atoms listed in the summary table')

        geometry_parser = subparsers.add_parser('geometry', help='Derive display geometry for one model')
        geometry_parser.add_argument('input_file', help='Input PDB file path')
        geometry_parser.add_argument('--mode', dest='display_mode', choices=sorted(REPRESENTATIONS),
                                     help='Representation (default: ball-and-stick)')
        geometry_parser.add_argument('--model', type=int, help='MODEL serial number (default: first model)')
        geometry_parser.add_argument('--max-atoms', type=int, help='Subsample models larger than this')
        geometry_parser.add_argument('--scale', type=float, help='Length multiplier for JSON output (default: render scale)')
        geometry_parser.add_argument('-o', '--output-file', help='Output JSON file path')

        parsed_args = parser.parse_args(args)
        for key, value in vars(parsed_args).items():
            if value is not None:
                default_values[key] = value

        if default_values['max_atoms'] is not None:
            default_values['config']['max_atoms'] = default_values['max_atoms']
        if default_values['progress']:
            default_values['config']['show_progress'] = True
        return default_values

    def print_help(self) -> None:
        """
        Print help message.
        """
        print("=== PDB Geometry Usage Instructions ===")
        print("\nBasic Usage:")
        print("  pdbgeom [options] <command> [command options]")
        print("\nCommands:")
        print("  parse       Parse a PDB file and report its contents")
        print("  geometry    Derive ball-and-stick, space-filling, ribbon or surface geometry")
        print("\nCommon Options:")
        print("  --help, -h  Show this help message")
        print("  --debug, -d Enable debug mode")
        print("  --log-file  Also write log lines to a file")
        print("  --progress  Show progress bars")
        print("  --json, -j  JSON parameter string or file path")
        print("\nExamples:")
        print("  pdbgeom parse structure/1CRN.pdb")
        print("  pdbgeom geometry structure/1CRN.pdb --mode ribbon -o ribbon.json")
        print("  pdbgeom --json '{\"relaxation_iterations\": 4}' geometry structure/1CRN.pdb --mode space-filling")

    def run(self, args: List[str]) -> int:
        """
        Run the CLI application.

        Args:
            args (List[str]): Command-line arguments

        Returns:
            int: Exit code (0 for success, 1 for failure)
        """
        self.logger = Logger(False, None)
        try:
            parsed_args = self.parse_arguments(args)
            self.logger = Logger(parsed_args['debug'], parsed_args['log_file'], module_name="pdbgeom")
            self.config = GeometryConfig.load(parsed_args['config'])
        except ConfigurationError as e:
            self.logger.error(str(e))
            return 1

        if parsed_args['debug']:
            self.logger.log_dict(self.config.to_dict(), "Configuration")
        self.parser = PDBParser(self.config, self.logger.child("parser"))
        scale = parsed_args['scale'] if parsed_args['scale'] is not None else self.config.render_scale
        self.writer = GeometryWriter(self.logger, scale)

        if parsed_args['command'] == 'parse':
            return self.run_parse(parsed_args)
        if parsed_args['command'] == 'geometry':
            return self.run_geometry(parsed_args)
        self.print_help()
        return 1

    def _load(self, input_file: str) -> Optional[StructureFile]:
        self.logger.info(f"Parsing PDB file: {input_file}")
        try:
            return self.parser.parse_file(input_file)
        except OSError as e:
            self.logger.error(f"Cannot read {input_file}: {e}")
        except EmptyStructureError as e:
            self.logger.error(f"{e} in {input_file}")
            for diagnostic in e.diagnostics:
                self.logger.warning(diagnostic, indent=2)
        return None

    def run_parse(self, parsed_args: Dict[str, Any]) -> int:
        """
        Run parse mode: report, statistics, composition and atom summary.

        Args:
            parsed_args (Dict[str, Any]): Parsed command-line arguments

        Returns:
            int: Exit code (0 for success, 1 for failure)
        """
        structure = self._load(parsed_args['input_file'])
        if structure is None:
            self.logger.error("Parsing failed, exiting program")
            return 1

        self.writer.write_parsing_report(structure)

        statistics = StructureStatistics(structure)
        self.logger.section("Statistics")
        for key, value in statistics.get_statistics().items():
            self.logger.info(f"{key}: {value}")
        self.writer.write_composition(statistics.get_composition())

        model = structure.get_model()
        self.writer.write_atom_summary(model, 0, min(int(parsed_args['atom_summary']), model.atom_count))
        return 0

    def run_geometry(self, parsed_args: Dict[str, Any]) -> int:
        """
        Run geometry mode for one representation.

        Args:
            parsed_args (Dict[str, Any]): Parsed command-line arguments

        Returns:
            int: Exit code (0 for success, 1 for failure)
        """
        structure = self._load(parsed_args['input_file'])
        if structure is None:
            self.logger.error("Parsing failed, exiting program")
            return 1

        try:
            model = structure.get_model(parsed_args['model'])
        except KeyError as e:
            self.logger.error(str(e.args[0]))
            return 1

        mode = parsed_args['display_mode']
        self.logger.info(f"Deriving {mode} geometry for model {model.model_number} ({model.atom_count} atoms)")
        try:
            result = derive_geometry(model, mode, self.config, self.logger.child("geometry"))
        except (ConfigurationError, ComputationCancelled) as e:
            self.logger.error(str(e))
            return 1

        self.writer.write_geometry_summary(result)

        output_file = parsed_args['output_file']
        if output_file:
            self.logger.info(f"Writing geometry file: {output_file}")
            if self.writer.write_file(result, output_file, structure):
                self.logger.info("Write successful")
            else:
                self.logger.error("Write failed")
                return 1
        return 0


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv (Optional[List[str]]): Arguments, defaults to ``sys.argv[1:]``

    Returns:
        int: Exit code
    """
    cli = PDBGeometryCLI()
    return cli.run(sys.argv[1:] if argv is None else list(argv))
