"""Tests for alias normalization, usage collection, hierarchy correction and emission."""

from pathlib import Path

import pytest

from js_to_ts.core.errors import AliasRewriteError, HierarchyCycleError, MissingSuperclassError
from js_to_ts.core.types import CallableKind
from js_to_ts.inference.alias_normalizer import AliasNormalizer
from js_to_ts.inference.annotations import normalize_type, parse_comment_annotation, parse_jsdoc
from js_to_ts.inference.arity import CallSiteArityAnalyzer
from js_to_ts.inference.corrector import correct_properties
from js_to_ts.inference.emitter import DeclarationEmitter, FieldDeclaration
from js_to_ts.inference.hierarchy import ClassHierarchyGraph
from js_to_ts.inference.models import CallSiteFact, ClassUsageRecord
from js_to_ts.inference.signatures import SignatureTyper
from js_to_ts.inference.usage_collector import UsageCollector
from js_to_ts.parsing.parser import CodeParser
from js_to_ts.parsing.scanner import FileScanner
from js_to_ts.source.classes import ClassView
from js_to_ts.source.project import Project
from js_to_ts.source.references import ReferenceResolver


def load_project(root: Path, parser: CodeParser) -> Project:
    project = Project(root, parser=parser)
    for file_info in FileScanner(root).scan_all():
        project.add_file(file_info)
    return project


def records_by_name(records: list[ClassUsageRecord]) -> dict[str | None, ClassUsageRecord]:
    return {record.name: record for record in records}


def declare_fields(project: Project, settings) -> int:
    records = correct_properties(UsageCollector(project).collect_project())
    return DeclarationEmitter(project, settings).emit(records)


class TestAliasNormalizer:
    """Tests for rewriting `var that = this` aliases."""

    def test_function_expressions_fixture(self, fixture_project, parser):
        """Test aliases are removed and callbacks become arrows."""
        root = fixture_project("function-expressions")
        project = load_project(root, parser)
        source_file = project.get_file_or_raise(root / "class-with-function-expression.js")

        rewritten = AliasNormalizer(project).normalize_file(source_file)

        text = source_file.text
        assert rewritten == 4
        assert "var that = this" not in text
        assert "const that = this" not in text
        assert "var myFn1 = () => {\n\t\t\tthis.prop1 = 1;" in text
        assert "var myFn2 = (a, b) => {\n\t\t\tthis.prop2 = 1;\n\t\t\tthis['prop3'] = 2;" in text
        assert "myMethod() {\n\t\tvar myFn1" in text
        assert "complexMethodWhichCausesErrorInTsSimpleAstTransforms() {\n\t\tthis.blah.blah2.blah3 = 42;" in text
        assert "var somethingElse = 1;" in text
        assert "var self = this" not in text
        assert "me = this" not in text
        assert not source_file.root_node.has_error

    def test_shorthand_property_keeps_key(self, make_project):
        """Test that `{ self }` becomes `{ self: this }`."""
        project = make_project({"a.js": "class A {\n\tm() {\n\t\tconst self = this;\n\t\treturn { self };\n\t}\n}\n"})
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        AliasNormalizer(project).normalize_file(source_file)

        assert "return { self: this };" in source_file.text

    def test_function_using_arguments_is_rejected(self, make_project):
        """Test that a callback reading `arguments` cannot become an arrow."""
        project = make_project(
            {
                "a.js": (
                    "class A {\n\tm() {\n\t\tvar that = this;\n"
                    "\t\treturn function() { that.x = arguments[0]; };\n\t}\n}\n"
                )
            }
        )
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        with pytest.raises(AliasRewriteError):
            AliasNormalizer(project).normalize_file(source_file)

    def test_reassigned_alias_raises(self, make_project):
        """Test that assigning to the alias is rejected."""
        project = make_project(
            {"a.js": "class A {\n\tm(other) {\n\t\tvar that = this;\n\t\tthat = other;\n\t}\n}\n"}
        )
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        with pytest.raises(AliasRewriteError) as exc_info:
            AliasNormalizer(project).normalize_file(source_file)

        assert exc_info.value.alias == "that"

    def test_rebound_alias_raises(self, make_project):
        """Test that a nested parameter with the alias name is rejected."""
        project = make_project(
            {
                "a.js": (
                    "class A {\n\tm(items) {\n\t\tvar that = this;\n"
                    "\t\titems.forEach(function(that) { that.x = 1; });\n\t}\n}\n"
                )
            }
        )
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        with pytest.raises(AliasRewriteError):
            AliasNormalizer(project).normalize_file(source_file)

    def test_file_without_aliases_is_untouched(self, make_project):
        """Test that nothing is applied when no alias exists."""
        project = make_project({"a.js": "class A {\n\tm() {\n\t\tthis.x = 1;\n\t}\n}\n"})
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        assert AliasNormalizer(project).normalize_file(source_file) == 0
        assert not source_file.modified


class TestUsageCollector:
    """Tests for ClassUsageRecord collection."""

    def test_properties_in_first_seen_order(self, fixture_project, parser):
        """Test that aliases are followed after normalization in source order."""
        root = fixture_project("function-expressions")
        project = load_project(root, parser)
        AliasNormalizer(project).normalize_project()

        [record] = UsageCollector(project).collect_project()

        assert record.name == "ClassWithFunctionExpression"
        assert record.properties == ("prop1", "prop2", "blah")
        assert record.methods == frozenset(
            {"myMethod", "myMethod2", "myMethod3", "complexMethodWhichCausesErrorInTsSimpleAstTransforms"}
        )

    def test_destructuring_and_exclusions(self, make_project):
        """Test destructured keys, static members and computed access."""
        project = make_project(
            {
                "a.js": (
                    "class A {\n"
                    "\tconstructor() {\n"
                    "\t\tthis.first = 1;\n"
                    "\t\tthis['computed'] = 2;\n"
                    "\t\tthis.run();\n"
                    "\t}\n"
                    "\trun() {\n"
                    "\t\tconst { second, third: renamed } = this;\n"
                    "\t\tconst fn = function() { this.notMine = 1; };\n"
                    "\t}\n"
                    "\tstatic create() {\n"
                    "\t\tthis.staticOnly = 1;\n"
                    "\t}\n"
                    "}\n"
                )
            }
        )

        [record] = UsageCollector(project).collect_project()

        assert record.properties == ("first", "second", "third")
        assert "run" not in record.properties

    def test_declared_fields_come_first(self, make_project):
        """Test that TypeScript field declarations count as properties."""
        project = make_project({"a.ts": "class A {\n\tdeclared: number;\n\tm() { this.used = 1; }\n}\n"})

        [record] = UsageCollector(project).collect_project()

        assert record.properties == ("declared", "used")

    def test_superclass_resolution(self, fixture_project, parser):
        """Test imported, default-exported, global and external superclasses."""
        root = fixture_project("superclass-subclass")
        project = load_project(root, parser)

        records = records_by_name(UsageCollector(project).collect_project())

        assert records["MySubClass"].superclass_name == "MyClass"
        assert records["MySubClass"].superclass_path == root / "my-class.js"
        assert records["AnotherSubClass"].superclass_name == "DefaultExportClass"
        assert records["AnotherSubClass"].superclass_path == root / "default-export-class.js"
        assert records["MyError"].superclass_name == "Error"
        assert records["MyError"].superclass_path is None
        assert records["Emitter"].superclass_path is None
        assert records["MySuperClass"].has_superclass is False

    def test_alias_accesses_match_receiver_accesses(self, make_project):
        """Test `var self = this; self.x` yields the same properties as `this.x`."""
        project = make_project(
            {
                "aliased.js": (
                    "class Aliased {\n\tm() {\n\t\tvar self = this;\n"
                    "\t\tself.x = 1;\n\t\tself.y.z = 2;\n\t}\n}\n"
                ),
                "direct.js": "class Direct {\n\tm() {\n\t\tthis.x = 1;\n\t\tthis.y.z = 2;\n\t}\n}\n",
            }
        )

        before = records_by_name(UsageCollector(project).collect_project())
        AliasNormalizer(project).normalize_project()
        after = records_by_name(UsageCollector(project).collect_project())

        assert before["Direct"].properties == ("x", "y")
        assert before["Aliased"].properties == before["Direct"].properties
        assert after["Aliased"].properties == after["Direct"].properties

    def test_commonjs_superclass_is_followed(self, make_project):
        """Test a superclass bound by require() links to the exporting file."""
        project = make_project(
            {
                "base.js": "class Base {\n\tm() {\n\t\tthis.x = 1;\n\t}\n}\nmodule.exports = Base;\n",
                "sub.js": (
                    "const Base = require('./base');\n"
                    "class Sub extends Base {\n\tn() {\n\t\tthis.x = 2;\n\t\tthis.y = 1;\n\t}\n}\n"
                ),
            }
        )

        records = records_by_name(correct_properties(UsageCollector(project).collect_project()))

        assert records["Sub"].superclass_name == "Base"
        assert records["Sub"].superclass_path == project.root_path / "base.js"
        assert records["Sub"].properties == ("y",)

    def test_destructured_require_superclass(self, make_project):
        """Test `const { Base } = require(...)` follows the named export."""
        project = make_project(
            {
                "lib.js": "class Base {\n\tm() {\n\t\tthis.x = 1;\n\t}\n}\nexports.Base = Base;\n",
                "sub.js": (
                    "const { Base } = require('./lib');\n"
                    "class Sub extends Base {\n\tn() {\n\t\tthis.x = 2;\n\t}\n}\n"
                ),
            }
        )

        records = records_by_name(correct_properties(UsageCollector(project).collect_project()))

        assert records["Sub"].superclass_path == project.root_path / "lib.js"
        assert records["Sub"].properties == ()

    @pytest.mark.parametrize(
        "files",
        [
            {
                "a.js": (
                    "const Base = class {\n\tm() {\n\t\tthis.x = 1;\n\t}\n};\n"
                    "class Sub extends Base {\n\tn() {\n\t\tthis.y = 1;\n\t}\n}\n"
                )
            },
            {
                "base.js": "module.exports = class Base {\n\tm() {\n\t\tthis.x = 1;\n\t}\n};\n",
                "a.js": "const Base = require('./base');\nclass Sub extends Base {\n\tn() {\n\t\tthis.y = 1;\n\t}\n}\n",
            },
        ],
        ids=["variable-bound", "module-exports"],
    )
    def test_class_expression_superclass_is_opaque(self, make_project, files):
        """Test a superclass defined by a class expression gets no hierarchy edge."""
        project = make_project(files)

        records = records_by_name(correct_properties(UsageCollector(project).collect_project()))

        assert list(records) == ["Sub"]
        assert records["Sub"].superclass_name == "Base"
        assert records["Sub"].superclass_path is None
        assert records["Sub"].properties == ("y",)

    def test_superclass_in_excluded_file_raises(self, write_files, parser):
        """Test a relative import of a file left out of the analyzed set is fatal."""
        root = write_files(
            {
                "lib/base.js": "export class Base {\n\tm() {\n\t\tthis.x = 1;\n\t}\n}\n",
                "sub.js": "import { Base } from './lib/base';\nclass Sub extends Base {\n\tn() {\n\t\tthis.y = 1;\n\t}\n}\n",
            }
        ).resolve()
        project = Project(root, parser=parser)
        for file_info in FileScanner(root, exclude_patterns=["lib/*"]).scan_all():
            project.add_file(file_info)

        with pytest.raises(MissingSuperclassError) as exc_info:
            UsageCollector(project).collect_project()

        assert exc_info.value.missing_path == str(root / "lib" / "base.js")
        assert exc_info.value.subclass_id == f"{root / 'sub.js'}::Sub"
        assert exc_info.value.superclass_id == f"{root / 'lib' / 'base.js'}::Base"

    def test_superclass_under_node_modules_is_external(self, write_files, parser):
        """Test a relative import into node_modules stays an opaque dependency."""
        root = write_files(
            {
                "node_modules/pkg/base.js": "export class Base {}\n",
                "sub.js": "import { Base } from './node_modules/pkg/base';\nclass Sub extends Base {}\n",
            }
        ).resolve()
        project = load_project(root, parser)

        [record] = UsageCollector(project).collect_project()

        assert record.superclass_name == "Base"
        assert record.superclass_path is None


class TestClassHierarchyGraph:
    """Tests for the hierarchy graph and correction."""

    def test_superclass_first_order(self):
        """Test that ancestors are ordered before descendants."""
        records = [
            ClassUsageRecord(Path("c.js"), "C", "B", Path("b.js")),
            ClassUsageRecord(Path("b.js"), "B", "A", Path("a.js")),
            ClassUsageRecord(Path("a.js"), "A"),
        ]

        hierarchy = ClassHierarchyGraph.build(records)
        order = hierarchy.superclass_first_order()

        assert order.index("a.js::A") < order.index("b.js::B") < order.index("c.js::C")
        assert hierarchy.ancestors("c.js::C") == ["b.js::B", "a.js::A"]

    def test_cycle_raises(self):
        """Test that a subclass cycle is reported."""
        records = [
            ClassUsageRecord(Path("a.js"), "A", "B", Path("b.js")),
            ClassUsageRecord(Path("b.js"), "B", "A", Path("a.js")),
        ]

        with pytest.raises(HierarchyCycleError) as exc_info:
            correct_properties(records)

        assert set(exc_info.value.cycle) == {"a.js::A", "b.js::B"}

    def test_missing_superclass_raises(self):
        """Test that a superclass resolved into the set must exist there."""
        records = [ClassUsageRecord(Path("a.js"), "A", "Ghost", Path("b.js"))]

        with pytest.raises(MissingSuperclassError) as exc_info:
            ClassHierarchyGraph.build(records)

        assert exc_info.value.subclass_id == "a.js::A"
        assert exc_info.value.superclass_id == "b.js::Ghost"

    def test_external_superclass_is_not_linked(self):
        """Test that a superclass without a path adds no edge."""
        hierarchy = ClassHierarchyGraph.build([ClassUsageRecord(Path("a.js"), "A", "Error", None)])

        assert hierarchy.superclass_of("a.js::A") is None

    def test_corrector_removes_inherited_members(self):
        """Test that properties and methods of every ancestor are dropped."""
        records = [
            ClassUsageRecord(Path("a.js"), "A", methods=frozenset({"run"}), properties=("x",)),
            ClassUsageRecord(Path("b.js"), "B", "A", Path("a.js"), properties=("x", "y")),
            ClassUsageRecord(Path("c.js"), "C", "B", Path("b.js"), properties=("x", "y", "run", "z")),
        ]

        corrected = records_by_name(correct_properties(records))

        assert corrected["A"].properties == ("x",)
        assert corrected["B"].properties == ("y",)
        assert corrected["C"].properties == ("z",)

    def test_corrector_on_fixture(self, fixture_project, parser):
        """Test inherited props two levels up are dropped."""
        root = fixture_project("superclass-subclass")
        project = load_project(root, parser)

        corrected = records_by_name(correct_properties(UsageCollector(project).collect_project()))

        assert corrected["MySuperClass"].properties == ("mySuperClassProp",)
        assert corrected["MyClass"].properties == ("myClassProp1", "myClassProp2", "myClassProp3")
        assert corrected["MySubClass"].properties == ("mySubClassProp",)
        assert corrected["AnotherSubClass"].properties == ("anotherSubClassProp",)
        assert corrected["MyError"].properties == ("code",)


class TestAnnotations:
    """Tests for comment and JSDoc type hints."""

    def test_comment_annotation_segments(self):
        """Test every segment of the micro-syntax."""
        annotation = parse_comment_annotation("// Types: [`number` #0# @true@ ^integer^ ~int32~] - ")

        assert annotation.type == "number"
        assert annotation.default == "0"
        assert annotation.is_optional
        assert annotation.aux_type == "integer"
        assert annotation.aux_format == "int32"

    def test_empty_segments_are_absent(self):
        """Test that `##` and `@@` carry no value."""
        annotation = parse_comment_annotation("// [`boolean` ## @@]")

        assert annotation.type == "boolean"
        assert annotation.default is None
        assert not annotation.is_optional

    def test_plain_comment_has_no_annotation(self):
        """Test that an ordinary comment is ignored."""
        assert parse_comment_annotation("// just a comment") is None

    def test_parse_jsdoc_tags(self):
        """Test param, optional param with default, return and type tags."""
        doc = parse_jsdoc(
            "/**\n"
            " * Updates the weight.\n"
            " *\n"
            " * @param {number} weight - The target weight value.\n"
            " * @param {number} [seconds=0] - The time.\n"
            " * @returns {Array.<string>}\n"
            " */"
        )

        assert doc.description == "Updates the weight."
        assert doc.param("weight").type == "number"
        assert doc.param("seconds").optional
        assert doc.param("seconds").default == "0"
        assert doc.returns == "string[]"
        assert doc.param("missing") is None

    def test_plain_block_comment_is_not_jsdoc(self):
        """Test that `/* ... */` is not parsed."""
        assert parse_jsdoc("/* @param {number} x */") is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("?number", ("number", True)),
            ("string=", ("string", True)),
            ("Array.<string>", ("string[]", False)),
            ("Array<string|number>", ("(string | number)[]", False)),
            ("Object.<string, number>", ("Record<string, number>", False)),
            ("string | undefined", ("string | undefined", False)),
            ("*", ("any", False)),
            ("Object", ("object", False)),
        ],
    )
    def test_normalize_type(self, raw, expected):
        """Test JSDoc to TypeScript type conversion."""
        assert normalize_type(raw) == expected


class TestDeclarationEmitter:
    """Tests for field declaration emission."""

    def test_render(self):
        """Test every part of a rendered declaration."""
        field = FieldDeclaration("count", "number", optional=True, initializer="0")

        assert field.render() == "public count?: number = 0;"
        assert FieldDeclaration("x", "any", scope="").render() == "x: any;"

    def test_jsdoc_types(self, fixture_project, parser, settings):
        """Test types from class and constructor JSDoc with the fallback."""
        root = fixture_project("class-with-jsdoc")
        project = load_project(root, parser)

        added = declare_fields(project, settings)

        text = project.get_file_or_raise(root / "my-class.js").text
        assert added == 6
        assert (
            "export class Test {\n"
            "\tpublic numberProp?: number;\n"
            "\tpublic strProp: string | undefined;\n"
            "\tpublic boolProp: boolean;\n"
            "\tpublic dateProp: Date;\n"
            "\tpublic tags: string[];\n"
            "\tpublic untyped: any;\n"
            "\n"
            "\t/**"
        ) in text

    def test_comment_types(self, fixture_project, parser, settings):
        """Test types, defaults and optionality from trailing comments."""
        root = fixture_project("class-with-comment-types")
        project = load_project(root, parser)

        declare_fields(project, settings)

        text = project.get_file_or_raise(root / "my-class.js").text
        assert "\tpublic numberProp?: number = 0;\n" in text
        assert "\tpublic strProp?: string = 'New Value';\n" in text
        assert "\tpublic boolProp: boolean = true;\n" in text
        assert "\tpublic dateProp: Date = new Date();\n" in text
        assert "\tpublic intProp: number;\n" in text
        assert "\tpublic plainProp: any;\n" in text

    def test_inherited_fields_not_redeclared(self, fixture_project, parser, settings):
        """Test the subclass only declares what no ancestor has."""
        root = fixture_project("superclass-subclass")
        project = load_project(root, parser)

        declare_fields(project, settings)

        sub_text = project.get_file_or_raise(root / "my-sub-class.js").text
        class_text = project.get_file_or_raise(root / "my-class.js").text
        assert "{\n\tpublic mySubClassProp: any;\n\n\tconstructor() {" in sub_text
        assert "mySuperClassProp: any" not in sub_text
        assert (
            "{\n\tpublic myClassProp1: any;\n\tpublic myClassProp2: any;\n\tpublic myClassProp3: any;\n\n\tconstructor()"
        ) in class_text

    def test_typescript_declarations_in_superclass(self, fixture_project, parser, settings):
        """Test that a declared superclass field is not repeated below."""
        root = fixture_project("typescript-class")
        project = load_project(root, parser)

        added = declare_fields(project, settings)

        text = project.get_file_or_raise(root / "declarations-in-superclass.ts").text
        assert added == 1
        assert "class SubTypeScriptClass extends SuperTypeScriptClass {\n\tpublic subProp: any;\n\n\tconstructor()" in text
        assert text.count("superProp: any") == 1

    def test_emission_is_idempotent(self, make_project, settings):
        """Test that a second run adds nothing."""
        project = make_project({"a.js": "class A {\n\tconstructor() {\n\t\tthis.x = 1;\n\t}\n}\n"})

        assert declare_fields(project, settings) == 1
        first = project.get_file_or_raise(project.root_path / "a.js").text
        assert declare_fields(project, settings) == 0
        assert project.get_file_or_raise(project.root_path / "a.js").text == first

    def test_property_scope_setting(self, make_project, settings):
        """Test that the configured scope prefixes each declaration."""
        settings.output.property_scope = "private"
        project = make_project({"a.js": "class A {\n\tconstructor() {\n\t\tthis.x = 1;\n\t}\n}\n"})

        declare_fields(project, settings)

        assert "class A {\n\tprivate x: any;\n\n\tconstructor()" in project.get_file_or_raise(project.root_path / "a.js").text


class TestReferenceResolver:
    """Tests for call-site lookup."""

    def test_call_sites_across_files(self, fixture_project, parser):
        """Test constructor, `this`, `super` and instance method calls."""
        root = fixture_project("fewer-args-than-params")
        project = load_project(root, parser)
        resolver = ReferenceResolver(project)
        super_file = project.get_file_or_raise(root / "super-class.js")
        view = ClassView(super_file, super_file.get_class("SuperClass"))

        constructor_sites = resolver.find_call_sites(super_file, view.constructor)
        method_sites = resolver.find_call_sites(super_file, view.find_method("superclassMethod"))
        public_sites = resolver.find_call_sites(super_file, view.find_method("somePublicMethod"))

        assert sorted(site.arg_count for site in constructor_sites) == [1, 3, 3, 3]
        assert [site.arg_count for site in method_sites] == [0]
        assert [site.arg_count for site in public_sites] == [1]
        assert public_sites[0].path == root / "call-to-class-method.js"

    def test_spread_counts_as_one(self, make_project):
        """Test that `...args` at a call site is one argument."""
        project = make_project({"a.js": "function f(a, b, c) {}\nf(...xs);\n"})
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        [site] = ReferenceResolver(project).find_call_sites(source_file, source_file.get_functions()[0])

        assert site.arg_count == 1


class TestCallSiteArityAnalyzer:
    """Tests for marking parameters optional from call sites."""

    def test_fewer_args_than_params(self, fixture_project, parser):
        """Test the cross-file scenario end to end."""
        root = fixture_project("fewer-args-than-params")
        project = load_project(root, parser)

        CallSiteArityAnalyzer(project).analyze_project()

        super_text = project.get_file_or_raise(root / "super-class.js").text
        sub_text = project.get_file_or_raise(root / "sub-class.js").text
        rest_text = project.get_file_or_raise(root / "constructor-with-rest-param.js").text
        assert "constructor( arg1, arg2?, arg3? )" in super_text
        assert "superclassMethod( arg? )" in super_text
        assert "somePublicMethod( arg1, arg2? )" in super_text
        assert "subclassMethod( arg1, arg2 )" in sub_text
        assert "subclassMethod2( arg1?, arg2? )" in sub_text
        assert "constructor(...args)" in rest_text
        assert "methodWithRestParam(...args)" in rest_text

    def test_functions(self, fixture_project, parser):
        """Test defaults, binding patterns and callables with no call sites."""
        root = fixture_project("fewer-args-than-params")
        project = load_project(root, parser)

        CallSiteArityAnalyzer(project).analyze_project()

        text = project.get_file_or_raise(root / "functions.js").text
        assert "function combine( a, b, c? )" in text
        assert "function withDefaults( a, b = 2, { c }, ...rest )" in text
        assert "function neverCalled( a, b )" in text

    def test_collect_fact(self, make_project):
        """Test the fact records declared count and minimum arguments."""
        project = make_project({"a.js": "function f(a, b, c) {}\nf(1, 2);\nf(1);\n"})
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        fact = CallSiteArityAnalyzer(project).collect_fact(source_file, source_file.get_functions()[0])

        assert fact.name == "f"
        assert fact.kind == CallableKind.FUNCTION
        assert fact.declared_params == 3
        assert fact.call_sites == 2
        assert fact.min_args == 1

    def test_more_args_than_params(self):
        """Test the optional index never passes the declared count."""
        fact = CallSiteFact(Path("a.js"), "f", CallableKind.FUNCTION, 2, 1, 5)

        assert fact.first_optional_index == 2

    def test_binding_pattern_limits_marking(self, make_project):
        """Test only the suffix after a required destructured param is marked."""
        project = make_project({"a.js": "function f(a, { b }, c, d) {}\nf();\n"})

        CallSiteArityAnalyzer(project).analyze_project()

        assert "function f(a, { b }, c?, d?)" in project.get_file_or_raise(project.root_path / "a.js").text

    def test_unresolvable_callable_is_left_unchanged(self, make_project):
        """Test a computed method name keeps its parameters while others are marked."""
        project = make_project(
            {
                "a.js": (
                    "class A {\n"
                    "\t['k'](a, b) {}\n"
                    "\tm(a, b) {}\n"
                    "\trun() {\n\t\tthis.m(1);\n\t\tthis['k'](1);\n\t}\n"
                    "}\n"
                    "function f(a, b, c) {}\n"
                    "f(1, 2);\n"
                )
            }
        )

        marked = CallSiteArityAnalyzer(project).analyze_project()

        text = project.get_file_or_raise(project.root_path / "a.js").text
        assert marked == 2
        assert "['k'](a, b) {}" in text
        assert "m(a, b?) {}" in text
        assert "function f(a, b, c?) {}" in text

    def test_required_class_constructor_call_sites(self, make_project):
        """Test `new Base()` on a require() binding reaches the constructor."""
        project = make_project(
            {
                "base.js": "class Base {\n\tconstructor(a, b) {}\n}\nmodule.exports = Base;\n",
                "main.js": "const Base = require('./base');\nnew Base(1);\n",
            }
        )

        CallSiteArityAnalyzer(project).analyze_project()

        assert "constructor(a, b?) {}" in project.get_file_or_raise(project.root_path / "base.js").text

    def test_second_run_changes_nothing(self, make_project):
        """Test that already optional parameters are left alone."""
        project = make_project({"a.ts": "function f(a, b) {}\nf(1);\n"})
        analyzer_runs = [CallSiteArityAnalyzer(project).analyze_project() for _ in range(2)]

        assert analyzer_runs == [1, 0]


class TestSignatureTyper:
    """Tests for JSDoc-driven signature types."""

    def test_function_calls_with_jsdoc(self, fixture_project, parser, settings):
        """Test parameter and return types on methods, accessors and functions."""
        root = fixture_project("function-calls-with-jsdoc")
        project = load_project(root, parser)
        source_file = project.get_file_or_raise(root / "my-class.js")

        added = SignatureTyper(project, settings).type_project()

        text = source_file.text
        assert added > 0
        assert "set weight(weight: number) {" in text
        assert "get weight(): number {" in text
        assert "setWeight(weight: number, seconds: number = 0, alterFn: any): number {" in text
        assert "get isBright(): boolean {" in text
        assert "simpleReturn(): boolean {" in text
        assert "simpleParamsWithReturn(strParam: string, numParam: number): string[] {" in text
        assert "function addToWeight(weight: number, seconds: number = 0): number {" in text
        assert "\tconstructor() {" in text

    def test_untyped_parameters_get_fallback(self, make_project, settings):
        """Test rest, destructured and plain parameters without JSDoc."""
        project = make_project({"a.js": "function f(a, { b, c = 1 }, [d], ...rest) {}\n"})
        source_file = project.get_file_or_raise(project.root_path / "a.js")

        SignatureTyper(project, settings).type_file(source_file)

        assert "function f(a: any, { b, c = 1 }: { b: any; c?: any }, [d]: any[], ...rest: any) {}" in source_file.text
        assert not source_file.root_node.has_error

    def test_typescript_files_are_skipped(self, make_project, settings):
        """Test that files that were TypeScript to begin with are not typed."""
        project = make_project({"a.ts": "function f(a) {}\n"})

        assert SignatureTyper(project, settings).type_project() == 0
        assert project.get_file_or_raise(project.root_path / "a.ts").text == "function f(a) {}\n"
