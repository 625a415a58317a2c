#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Laravel schema generator

Builds the database, api, businessLogic and componentArchitecture
documents from migrations, route files, the HTTP kernel and the app/
directory tree. When the project ships a DatabaseSchemaService, the live
schema is read through `php artisan tinker` first, falling back to
migration scanning on any failure.
"""

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .base import SchemaGenerator
from ..detection.framework_detector import FrameworkInfo
from ..parsers.php_parser import PhpParser, TableInfo
from ..scanning.structure_scanner import StructureScanner, iter_file_records
from ..utils.config import Config
from ..utils.constants import CONFIG_SNIPPET_LIMIT
from ..utils.process import ProcessRunner


TINKER_EXPRESSION = (
    'echo json_encode((new App\\Services\\DatabaseSchemaService())->getSchema());'
)


class LaravelSchemaGenerator(SchemaGenerator):
    """Four-document generator for Laravel projects"""

    SCHEMA_SERVICE = 'app/Services/DatabaseSchemaService.php'
    MIGRATIONS_DIR = 'database/migrations'
    ROUTE_FILES = ['routes/web.php', 'routes/api.php']
    KERNEL_FILE = 'app/Http/Kernel.php'
    CONTROLLERS_DIR = 'app/Http/Controllers'

    # businessLogic section -> directory
    BUSINESS_LOGIC_DIRS = {
        'models': 'app/Models',
        'policies': 'app/Policies',
        'services': 'app/Services',
        'events': 'app/Events',
        'jobs': 'app/Jobs',
        'rules': 'app/Rules',
        'commands': 'app/Console/Commands',
        'middleware': 'app/Http/Middleware',
    }

    # componentArchitecture structure category -> (directory, extension)
    STRUCTURE_DIRS = {
        'controllers': ('app/Http/Controllers', '.php'),
        'models': ('app/Models', '.php'),
        'views': ('resources/views', '.blade.php'),
        'migrations': ('database/migrations', '.php'),
        'seeders': ('database/seeders', '.php'),
        'tests': ('tests', '.php'),
        'config': ('config', '.php'),
        'routes': ('routes', '.php'),
    }

    CONFIG_FILES = {
        'appConfig': 'config/app.php',
        'databaseConfig': 'config/database.php',
        'servicesConfig': 'config/services.php',
    }

    def __init__(self, project_root: Union[str, Path], framework: FrameworkInfo,
                 scanner: Optional[StructureScanner] = None,
                 parser: Optional[PhpParser] = None,
                 runner: Optional[ProcessRunner] = None,
                 use_tinker: bool = True,
                 tinker_timeout: float = 30,
                 config_snippet_limit: int = CONFIG_SNIPPET_LIMIT):
        super().__init__(project_root, framework)
        self.scanner = scanner or StructureScanner(self.project_root)
        self.parser = parser or PhpParser()
        self.runner = runner or ProcessRunner()
        self.use_tinker = use_tinker
        self.tinker_timeout = tinker_timeout
        self.config_snippet_limit = config_snippet_limit

    @classmethod
    def from_config(cls, project_root: Union[str, Path], framework: FrameworkInfo,
                    config: Config, runner: Optional[ProcessRunner] = None) -> 'LaravelSchemaGenerator':
        generation = config.generation
        return cls(
            project_root,
            framework,
            scanner=StructureScanner(project_root, content_limit=generation.content_limit),
            runner=runner,
            use_tinker=generation.use_tinker,
            tinker_timeout=generation.tinker_timeout_seconds,
            config_snippet_limit=generation.config_snippet_limit
        )

    def generate(self) -> Dict[str, Dict[str, Any]]:
        return {
            'database': self.generate_database_schema(),
            'api': self.generate_api_schema(),
            'businessLogic': self.generate_business_logic_schema(),
            'componentArchitecture': self.generate_component_schema(),
        }

    def _exists(self, relative: str) -> bool:
        return (self.project_root / relative).exists()

    def _read(self, relative: str) -> str:
        return (self.project_root / relative).read_text(encoding='utf-8', errors='replace')

    # ==================== Database ====================

    def generate_database_schema(self) -> Dict[str, Any]:
        schema = self.new_document('database', tables={}, relationships=[], constraints=[], indexes=[])

        try:
            live_schema = None
            if self.use_tinker and self._exists(self.SCHEMA_SERVICE):
                live_schema = self._read_live_schema()

            if live_schema is not None:
                self._apply_live_schema(schema, live_schema)
            else:
                tables = self.scan_migrations()
                schema['tables'] = {name: table.to_dict() for name, table in tables.items()}
                self._derive_relations(schema, tables)

        except Exception as e:
            schema['error'] = f"Failed to generate database schema: {e}"
            self.logger.error(f"Database schema generation error: {e}")

        return schema

    def _read_live_schema(self) -> Optional[Dict[str, Any]]:
        """Query DatabaseSchemaService through tinker, None on any failure"""
        try:
            result = self.runner.run(
                'php',
                ['artisan', 'tinker', f'--execute={TINKER_EXPRESSION}'],
                cwd=self.project_root,
                timeout=self.tinker_timeout
            )
            if not result.ok:
                raise RuntimeError(result.stderr.strip() or f"exit code {result.exit_code}")
            data = json.loads(result.stdout.strip())
            if not isinstance(data, dict):
                raise ValueError("schema service returned a non-object")
            return data
        except (OSError, subprocess.SubprocessError, RuntimeError, ValueError) as e:
            self.logger.warning(f"Failed to use Laravel tinker, falling back to migration scanning: {e}")
            return None

    def _apply_live_schema(self, schema: Dict[str, Any], live_schema: Dict[str, Any]):
        for table_name, table_data in live_schema.items():
            table_data = table_data or {}
            columns = table_data.get('columns') or {}
            relations = table_data.get('relations') or []

            schema['tables'][table_name] = {
                'columns': columns,
                'foreignKeys': relations,
                'primaryKey': self.find_primary_key(columns),
                'timestamps': self.has_timestamps(columns),
            }

            for relation in relations:
                schema['relationships'].append({
                    'table': table_name,
                    'column': relation.get('column'),
                    'referencedTable': relation.get('on'),
                    'referencedColumn': relation.get('references'),
                    'type': 'foreign_key',
                })

    def _derive_relations(self, schema: Dict[str, Any], tables: Dict[str, TableInfo]):
        for table in tables.values():
            for fk in table.foreignKeys:
                schema['relationships'].append({
                    'table': table.name,
                    'column': fk.column,
                    'referencedTable': fk.on,
                    'referencedColumn': fk.references,
                    'type': 'foreign_key',
                    'onDelete': fk.onDelete,
                    'onUpdate': fk.onUpdate,
                })
            for column in table.columns.values():
                if column.unique:
                    schema['constraints'].append({'table': table.name, 'column': column.name, 'type': 'unique'})
                if column.index:
                    schema['indexes'].append({'table': table.name, 'column': column.name, 'type': 'index'})

    def scan_migrations(self) -> Dict[str, TableInfo]:
        """Parse every migration file, later files overriding earlier ones per table"""
        tables: Dict[str, TableInfo] = {}
        migrations_dir = self.project_root / self.MIGRATIONS_DIR
        if not migrations_dir.is_dir():
            return tables

        for migration in sorted(migrations_dir.iterdir(), key=lambda p: p.name):
            if not (migration.is_file() and migration.name.endswith('.php')):
                continue
            try:
                content = migration.read_text(encoding='utf-8', errors='replace')
            except OSError as e:
                self.logger.warning(f"Skipping unreadable migration {migration.name}: {e}")
                continue
            table = self.parser.parse_migration(content, migration.name)
            if table:
                tables[table.name] = table

        return tables

    @staticmethod
    def find_primary_key(columns: Dict[str, Any]) -> Optional[str]:
        for name, info in columns.items():
            if (isinstance(info, dict) and info.get('key') == 'PRI') or name == 'id':
                return name
        return None

    @staticmethod
    def has_timestamps(columns: Dict[str, Any]) -> bool:
        return 'created_at' in columns and 'updated_at' in columns

    # ==================== API ====================

    def generate_api_schema(self) -> Dict[str, Any]:
        schema = self.new_document('api', routes={}, middleware=[], controllers={})

        try:
            for route_file in self.ROUTE_FILES:
                if self._exists(route_file):
                    routes = self.parser.parse_routes(self._read(route_file))
                    schema['routes'][route_file] = [route.to_dict() for route in routes]

            schema['controllers'] = self.scan_controllers()

            if self._exists(self.KERNEL_FILE):
                entries = self.parser.parse_middleware(self._read(self.KERNEL_FILE))
                schema['middleware'] = [entry.to_dict() for entry in entries]

        except Exception as e:
            schema['error'] = f"Failed to generate API schema: {e}"
            self.logger.error(f"API schema generation error: {e}")

        return schema

    def scan_controllers(self) -> Dict[str, Any]:
        controllers = {}
        tree = self.scanner.scan(self.CONTROLLERS_DIR, '.php')
        for name, record in iter_file_records(tree):
            controllers[name] = self.parser.parse_class(record['content']).to_dict()
        return controllers

    # ==================== Business Logic ====================

    def generate_business_logic_schema(self) -> Dict[str, Any]:
        schema = self.new_document('businessLogic', **{section: {} for section in self.BUSINESS_LOGIC_DIRS})

        try:
            for section, directory in self.BUSINESS_LOGIC_DIRS.items():
                schema[section] = self.scanner.scan(directory, '.php')
        except Exception as e:
            schema['error'] = f"Failed to generate business logic schema: {e}"
            self.logger.error(f"Business logic schema generation error: {e}")

        return schema

    # ==================== Component Architecture ====================

    def generate_component_schema(self) -> Dict[str, Any]:
        schema = self.new_document(
            'componentArchitecture',
            structure={category: {} for category in self.STRUCTURE_DIRS},
            dependencies={},
            configuration={}
        )

        try:
            for category, (directory, extension) in self.STRUCTURE_DIRS.items():
                schema['structure'][category] = self.scanner.scan(directory, extension)

            if self._exists('composer.json'):
                composer = json.loads(self._read('composer.json'))
                schema['dependencies'] = {
                    'require': composer.get('require') or {},
                    'requireDev': composer.get('require-dev') or {},
                    'autoload': composer.get('autoload') or {},
                    'scripts': composer.get('scripts') or {},
                }

            schema['configuration'] = {
                name: self.parse_config_file(path) for name, path in self.CONFIG_FILES.items()
            }

        except Exception as e:
            schema['error'] = f"Failed to generate component architecture schema: {e}"
            self.logger.error(f"Component architecture schema generation error: {e}")

        return schema

    def parse_config_file(self, relative: str) -> Dict[str, Any]:
        """Leading snippet of a PHP config file; {} when the file is absent"""
        if not self._exists(relative):
            return {}
        try:
            content = self._read(relative)
        except OSError as e:
            return {'error': str(e)}
        return {
            'file': relative,
            'content': content[:self.config_snippet_limit],
            'parsed': 'PHP config parsing not fully implemented',
        }

