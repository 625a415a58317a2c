#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PHP / Laravel source pattern extractors

Pulls structural facts out of raw PHP source using regex patterns:
- Migration tables, columns and foreign keys
- Route definitions
- Kernel middleware maps
- Class facts (methods, extends, traits, imports, namespace)

Note: These are shallow pattern matchers, not a PHP parser. A construct
that does not match a recognized token window is simply omitted. Routes
declared inside a group are reported as-is, without the group's prefix.
"""

import re
import logging
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field, asdict


@dataclass
class ColumnInfo:
    """Column declared through a schema builder call"""
    name: str
    type: str
    nullable: bool = False
    default: Optional[str] = None
    unique: bool = False
    index: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ForeignKeyInfo:
    """Foreign key declared with foreign()->references()->on()"""
    column: str
    references: str
    on: str
    onDelete: Optional[str] = None
    onUpdate: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TableInfo:
    """Table created or modified by one migration file"""
    name: str
    type: str  # 'create', 'modify'
    filename: str
    columns: Dict[str, ColumnInfo] = field(default_factory=dict)
    foreignKeys: List[ForeignKeyInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'type': self.type,
            'filename': self.filename,
            'columns': {name: column.to_dict() for name, column in self.columns.items()},
            'foreignKeys': [fk.to_dict() for fk in self.foreignKeys],
        }


@dataclass
class RouteDef:
    """One Route:: call"""
    method: str
    path: str
    controller: Optional[str] = None
    type: str = 'single'  # 'single', 'resource', 'group'
    definition: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MiddlewareEntry:
    """'key' => value pair of a kernel middleware map"""
    name: str
    class_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'class': self.class_name}


@dataclass
class MethodInfo:
    """Visibility-qualified class method"""
    name: str
    visibility: str
    signature: str
    static: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ClassInfo:
    """Class-level facts of one PHP file"""
    methods: List[MethodInfo] = field(default_factory=list)
    extends: Optional[str] = None
    traits: List[str] = field(default_factory=list)
    uses: List[str] = field(default_factory=list)
    namespace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'methods': [method.to_dict() for method in self.methods],
            'extends': self.extends,
            'traits': self.traits,
            'uses': self.uses,
            'namespace': self.namespace,
        }


class PhpParser:
    """
    Regex-based extractor for Laravel-style PHP sources

    Every method is a pure function of its text argument. For all
    "first match" facts the earliest textual occurrence wins.
    """

    PATTERNS = {
        # Migrations
        'create_table': r'Schema::create\([\'"]([^\'"]+)[\'"]',
        'modify_table': r'Schema::table\([\'"]([^\'"]+)[\'"]',
        'column_statement': r'\$table->\w+\([^;]+;',
        'column_definition': r'\$table->(\w+)\([\'"]([^\'"]+)[\'"]',
        'default': r'->default\(([^)]+)\)',
        'foreign_statement': r'\$table->foreign\([^;]+;',
        'foreign_column': r'\$table->foreign\([\'"]([^\'"]+)[\'"]\)',
        'references': r'->references\([\'"]([^\'"]+)[\'"]\)',
        'on': r'->on\([\'"]([^\'"]+)[\'"]\)',
        'on_delete': r'->onDelete\([\'"]([^\'"]+)[\'"]\)',
        'on_update': r'->onUpdate\([\'"]([^\'"]+)[\'"]\)',

        # Routes
        'route_start': r'Route::(get|post|put|patch|delete|resource|group)\(',
        'route_path': r'Route::\w+\(\s*[\'"]([^\'"]+)[\'"]',
        'route_controller': r'[\'"]([\w\\@]*Controller[\w\\@]*)[\'"]',
        'route_controller_class': r'([\w\\]*Controller)::class',

        # Kernel middleware
        'middleware': r'\'([^\']+)\'\s*=>\s*([^,\n]+)',

        # Classes
        'method': r'(?:public|private|protected)\s+(?:static\s+)?function\s+(\w+)\s*\([^)]*\)',
        'extends': r'class\s+\w+\s+extends\s+([^\s{]+)',
        'trait_use': r'use\s+([^;]+);',
        'import_use': r'^use\s+([^;]+);',
        'namespace': r'namespace\s+([^;]+);',
    }

    # Builder calls that take a column name but do not declare a column
    NON_COLUMN_CALLS = {
        'foreign', 'index', 'unique', 'primary', 'spatialIndex', 'fullText',
        'dropColumn', 'dropForeign', 'dropIndex', 'dropUnique', 'dropPrimary',
        'renameColumn', 'renameIndex', 'dropIfExists',
    }

    ROUTE_TYPES = {'resource': 'resource', 'group': 'group'}

    def __init__(self):
        self.logger = logging.getLogger('schemakeeper.php_parser')
        self._compiled = {name: re.compile(pattern) for name, pattern in self.PATTERNS.items()}
        self._compiled['import_use'] = re.compile(self.PATTERNS['import_use'], re.MULTILINE)

    def _first(self, name: str, text: str) -> Optional[str]:
        match = self._compiled[name].search(text)
        return match.group(1) if match else None

    # ==================== Migrations ====================

    def parse_migration(self, content: str, filename: str) -> Optional[TableInfo]:
        """
        Parse a migration file into at most one TableInfo

        Schema::create takes precedence over Schema::table.

        Args:
            content: Migration source
            filename: Migration file name

        Returns:
            TableInfo, or None if the file neither creates nor modifies a table
        """
        for pattern_name, table_type in (('create_table', 'create'), ('modify_table', 'modify')):
            table_name = self._first(pattern_name, content)
            if table_name:
                return TableInfo(
                    name=table_name,
                    type=table_type,
                    filename=filename,
                    columns=self.extract_columns(content),
                    foreignKeys=self.extract_foreign_keys(content)
                )
        return None

    def extract_columns(self, content: str) -> Dict[str, ColumnInfo]:
        """Extract column definitions keyed by column name"""
        columns: Dict[str, ColumnInfo] = {}
        for match in self._compiled['column_statement'].finditer(content):
            column = self.parse_column_definition(match.group(0))
            if column:
                columns[column.name] = column
        return columns

    def parse_column_definition(self, statement: str) -> Optional[ColumnInfo]:
        """
        Parse one `$table->type('name')...;` statement

        Returns:
            ColumnInfo, or None for calls without a quoted column name
        """
        match = self._compiled['column_definition'].search(statement)
        if not match:
            return None

        column_type, name = match.group(1), match.group(2)
        if column_type in self.NON_COLUMN_CALLS:
            return None

        return ColumnInfo(
            name=name,
            type=column_type,
            nullable='->nullable()' in statement,
            default=self.extract_default(statement),
            unique='->unique()' in statement,
            index='->index()' in statement
        )

    def extract_default(self, statement: str) -> Optional[str]:
        """Literal default value with quote characters stripped"""
        value = self._first('default', statement)
        if value is None:
            return None
        return value.replace('"', '').replace("'", '')

    def extract_foreign_keys(self, content: str) -> List[ForeignKeyInfo]:
        """Extract complete foreign key definitions"""
        foreign_keys = []
        for match in self._compiled['foreign_statement'].finditer(content):
            foreign_key = self.parse_foreign_key(match.group(0))
            if foreign_key:
                foreign_keys.append(foreign_key)
        return foreign_keys

    def parse_foreign_key(self, statement: str) -> Optional[ForeignKeyInfo]:
        """
        Parse one foreign() statement

        Column, referenced column and referenced table must all be present.
        """
        column = self._first('foreign_column', statement)
        references = self._first('references', statement)
        on = self._first('on', statement)

        if not (column and references and on):
            return None

        return ForeignKeyInfo(
            column=column,
            references=references,
            on=on,
            onDelete=self._first('on_delete', statement),
            onUpdate=self._first('on_update', statement)
        )

    # ==================== Routes ====================

    def parse_routes(self, content: str) -> List[RouteDef]:
        """
        Extract every Route:: call, including calls nested inside groups

        Each call's token window runs to the next statement terminator.
        """
        routes = []
        for match in self._compiled['route_start'].finditer(content):
            end = content.find(';', match.end())
            if end == -1:
                continue
            routes.append(self.parse_route_definition(content[match.start():end + 1]))
        return routes

    def parse_route_definition(self, statement: str) -> RouteDef:
        """Parse one Route:: statement"""
        method_match = re.match(r'Route::(\w+)', statement)
        method = method_match.group(1) if method_match else 'unknown'

        path_match = self._compiled['route_path'].match(statement)
        path = path_match.group(1) if path_match else 'unknown'

        controller = self._first('route_controller', statement)
        if controller is None:
            controller = self._first('route_controller_class', statement)

        return RouteDef(
            method=method,
            path=path,
            controller=controller,
            type=self.ROUTE_TYPES.get(method, 'single'),
            definition=statement.strip()
        )

    # ==================== Middleware ====================

    def parse_middleware(self, content: str) -> List[MiddlewareEntry]:
        """Extract 'key' => value pairs from a kernel definition"""
        middleware = []
        for match in self._compiled['middleware'].finditer(content):
            middleware.append(MiddlewareEntry(
                name=match.group(1).strip(),
                class_name=re.sub(r'[,;]$', '', match.group(2).strip())
            ))
        return middleware

    # ==================== Classes ====================

    def parse_class(self, content: str) -> ClassInfo:
        """Collect all class facts of one file"""
        return ClassInfo(
            methods=self.extract_methods(content),
            extends=self.extract_extends(content),
            traits=self.extract_traits(content),
            uses=self.extract_uses(content),
            namespace=self.extract_namespace(content)
        )

    def extract_methods(self, content: str) -> List[MethodInfo]:
        methods = []
        for match in self._compiled['method'].finditer(content):
            signature = match.group(0)
            if signature.startswith('public'):
                visibility = 'public'
            elif signature.startswith('private'):
                visibility = 'private'
            else:
                visibility = 'protected'
            methods.append(MethodInfo(
                name=match.group(1),
                visibility=visibility,
                signature=signature,
                static=bool(re.search(r'\bstatic\b', signature))
            ))
        return methods

    def extract_extends(self, content: str) -> Optional[str]:
        """Parent class of the first class declaration"""
        return self._first('extends', content)

    def extract_traits(self, content: str) -> List[str]:
        """
        Namespaced `use` statements that may pull in traits

        HTTP-layer imports and `use function` statements are excluded.
        """
        traits = []
        for match in self._compiled['trait_use'].finditer(content):
            name = match.group(1).strip()
            if name and '\\' in name and '\\Http\\' not in name and 'function' not in name:
                traits.append(name)
        return traits

    def extract_uses(self, content: str) -> List[str]:
        """Top-level namespaced imports"""
        uses = []
        for match in self._compiled['import_use'].finditer(content):
            name = match.group(1).strip()
            if name and '\\' in name:
                uses.append(name)
        return uses

    def extract_namespace(self, content: str) -> Optional[str]:
        namespace = self._first('namespace', content)
        return namespace.strip() if namespace else None
