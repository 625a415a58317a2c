#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test PHP / Laravel source pattern extractors
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schemakeeper.parsers.php_parser import (
    PhpParser, TableInfo, ColumnInfo, ForeignKeyInfo, RouteDef, MiddlewareEntry, ClassInfo
)


SAMPLE_MIGRATION = r'''<?php

use Illuminate\Database\Migrations\Migration;
use Illuminate\Database\Schema\Blueprint;
use Illuminate\Support\Facades\Schema;

return new class extends Migration
{
    public function up(): void
    {
        Schema::create('posts', function (Blueprint $table) {
            $table->id();
            $table->string('title')->unique();
            $table->string('status')->default('draft');
            $table->integer('views')->default(0)->index();
            $table->text('body')->nullable();
            $table->unsignedBigInteger('user_id');
            $table->foreign('user_id')->references('id')->on('users')->onDelete('cascade');
            $table->foreign('team_id')->references('id');
            $table->timestamps();
        });
    }
};
'''

SAMPLE_ROUTES = r'''<?php

use Illuminate\Support\Facades\Route;
use App\Http\Controllers\UserController;

Route::get('/users', [UserController::class, 'index']);
Route::post('/users', 'UserController@store');
Route::resource('posts', 'PostController');
Route::group(['prefix' => 'admin'], function () {
    Route::get('/dashboard', 'Admin\DashboardController@index');
});
'''

SAMPLE_KERNEL = r'''<?php

namespace App\Http;

class Kernel extends HttpKernel
{
    protected $routeMiddleware = [
        'auth' => \App\Http\Middleware\Authenticate::class,
        'throttle' => \Illuminate\Routing\Middleware\ThrottleRequests::class,
    ];
}
'''

SAMPLE_CONTROLLER = r'''<?php

namespace App\Http\Controllers;

use App\Models\User;
use Illuminate\Http\Request;

class UserController extends Controller
{
    use \Illuminate\Foundation\Auth\Access\AuthorizesRequests;

    public function index(Request $request)
    {
        return User::all();
    }

    protected static function helper($value)
    {
        return $value;
    }

    private function secret()
    {
    }
}
'''


class TestMigrationExtraction:
    """Test table, column and foreign key extraction"""

    def setup_method(self):
        self.parser = PhpParser()

    def test_create_table_with_nullable_column(self):
        """A single nullable string column inside Schema::create"""
        content = "Schema::create('users', function (Blueprint $table) { $table->string('name')->nullable(); });"

        table = self.parser.parse_migration(content, '2024_01_01_create_users_table.php')

        assert isinstance(table, TableInfo)
        assert table.name == 'users'
        assert table.type == 'create'
        assert table.columns['name'].to_dict() == {
            'name': 'name',
            'type': 'string',
            'nullable': True,
            'default': None,
            'unique': False,
            'index': False,
        }

    def test_column_modifiers_and_defaults(self):
        """Modifiers are presence checks; defaults lose their quotes"""
        table = self.parser.parse_migration(SAMPLE_MIGRATION, 'create_posts.php')

        assert table.columns['title'].unique is True
        assert table.columns['status'].default == 'draft'
        assert table.columns['views'].default == '0'
        assert table.columns['views'].index is True
        assert table.columns['body'].nullable is True
        assert table.columns['user_id'].type == 'unsignedBigInteger'

    def test_calls_without_column_name_are_ignored(self):
        """id(), timestamps() and foreign() do not declare named columns"""
        table = self.parser.parse_migration(SAMPLE_MIGRATION, 'create_posts.php')

        assert set(table.columns) == {'title', 'status', 'views', 'body', 'user_id'}
        assert table.columns['user_id'].type != 'foreign'

    def test_foreign_key_requires_all_three_parts(self):
        """Only complete foreign() statements are emitted"""
        table = self.parser.parse_migration(SAMPLE_MIGRATION, 'create_posts.php')

        assert table.foreignKeys == [
            ForeignKeyInfo(column='user_id', references='id', on='users', onDelete='cascade', onUpdate=None)
        ]

    def test_modify_table(self):
        """Schema::table yields a 'modify' TableInfo"""
        content = "Schema::table('users', function (Blueprint $table) { $table->string('phone')->nullable(); });"

        table = self.parser.parse_migration(content, 'add_phone.php')

        assert table.type == 'modify'
        assert list(table.columns) == ['phone']

    def test_create_takes_precedence_over_table(self):
        """A file with both statements reports the created table"""
        content = (
            "Schema::table('teams', function ($table) { $table->string('slug'); });\n"
            "Schema::create('projects', function ($table) { $table->string('name'); });"
        )

        table = self.parser.parse_migration(content, 'mixed.php')

        assert table.name == 'projects'
        assert table.type == 'create'

    def test_file_without_schema_statement(self):
        """No create or table statement yields None"""
        assert self.parser.parse_migration('<?php echo "hi";', 'noop.php') is None

    def test_to_dict_shape(self):
        """TableInfo serializes columns and foreign keys as plain data"""
        data = self.parser.parse_migration(SAMPLE_MIGRATION, 'create_posts.php').to_dict()

        assert data['name'] == 'posts'
        assert data['filename'] == 'create_posts.php'
        assert data['columns']['title']['type'] == 'string'
        assert data['foreignKeys'][0]['on'] == 'users'


class TestRouteExtraction:
    """Test Route:: call extraction"""

    def setup_method(self):
        self.parser = PhpParser()
        self.routes = self.parser.parse_routes(SAMPLE_ROUTES)

    def test_every_route_call_captured(self):
        """Nested routes are captured alongside top-level ones"""
        assert [route.method for route in self.routes] == ['get', 'post', 'resource', 'group', 'get']

    def test_controller_from_class_constant(self):
        """Array syntax falls back to the ::class reference"""
        route = self.routes[0]
        assert route.path == '/users'
        assert route.controller == 'UserController'
        assert route.type == 'single'

    def test_controller_from_string(self):
        """String syntax keeps the Controller@action token"""
        assert self.routes[1].controller == 'UserController@store'

    def test_resource_route(self):
        resource = self.routes[2]
        assert resource.type == 'resource'
        assert resource.path == 'posts'
        assert resource.controller == 'PostController'

    def test_group_and_nested_route(self):
        """Nested routes keep their own path, without the group prefix"""
        group, nested = self.routes[3], self.routes[4]

        assert group.type == 'group'
        assert group.path == 'unknown'
        assert nested.path == '/dashboard'
        assert nested.controller == r'Admin\DashboardController@index'

    def test_route_without_controller(self):
        """Closure routes have no controller"""
        routes = self.parser.parse_routes("Route::get('/health', function () { return 'ok'; });")

        assert routes == [RouteDef(
            method='get',
            path='/health',
            controller=None,
            type='single',
            definition="Route::get('/health', function () { return 'ok';"
        )]


class TestMiddlewareAndClassFacts:
    """Test kernel and class extraction"""

    def setup_method(self):
        self.parser = PhpParser()

    def test_middleware_map(self):
        """'key' => value pairs become MiddlewareEntry records"""
        entries = self.parser.parse_middleware(SAMPLE_KERNEL)

        assert entries == [
            MiddlewareEntry('auth', r'\App\Http\Middleware\Authenticate::class'),
            MiddlewareEntry('throttle', r'\Illuminate\Routing\Middleware\ThrottleRequests::class'),
        ]
        assert entries[0].to_dict() == {'name': 'auth', 'class': r'\App\Http\Middleware\Authenticate::class'}

    def test_class_facts(self):
        """Methods, parent, traits, imports and namespace"""
        info = self.parser.parse_class(SAMPLE_CONTROLLER)

        assert isinstance(info, ClassInfo)
        assert info.extends == 'Controller'
        assert info.namespace == r'App\Http\Controllers'
        assert info.uses == [r'App\Models\User', r'Illuminate\Http\Request']
        assert r'\Illuminate\Foundation\Auth\Access\AuthorizesRequests' in info.traits
        assert r'Illuminate\Http\Request' not in info.traits

    def test_method_visibility_and_static(self):
        methods = {method.name: method for method in self.parser.parse_class(SAMPLE_CONTROLLER).methods}

        assert set(methods) == {'index', 'helper', 'secret'}
        assert methods['index'].visibility == 'public'
        assert methods['helper'].visibility == 'protected'
        assert methods['helper'].static is True
        assert methods['secret'].visibility == 'private'
        assert methods['secret'].static is False

    def test_first_extends_wins(self):
        """Only the earliest extends clause is reported"""
        content = "class A extends Base {}\nclass B extends Other {}"
        assert self.parser.extract_extends(content) == 'Base'

    def test_plain_text_yields_empty_facts(self):
        """Unrecognized input is never an error"""
        info = self.parser.parse_class('just some text')

        assert info.to_dict() == {
            'methods': [],
            'extends': None,
            'traits': [],
            'uses': [],
            'namespace': None,
        }
        assert self.parser.parse_routes('nothing here') == []
        assert self.parser.parse_middleware('') == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
