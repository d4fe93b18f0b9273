"""Tests for the five built-in layer transforms."""

from __future__ import annotations

import pytest

from neurolint.domain.values import TransformOptions
from neurolint.layers import app_router, components, configuration, entity_cleanup, hydration

OPTS = TransformOptions()


class TestConfigurationLayer:
    def test_fixes_tsconfig(self, tsconfig: str) -> None:
        out = configuration.transform(tsconfig, OPTS)
        assert '"target": "es2020"' in out.code
        assert '"strict": true' in out.code
        assert out.change_count == 2
        assert out.improvements == (
            "Upgraded compile target to es2020 (1)",
            "Enabled TypeScript strict mode (1)",
        )

    def test_target_is_case_insensitive(self) -> None:
        out = configuration.transform('{"target": "ES5"}', OPTS)
        assert out.code == '{"target": "es2020"}'

    def test_react_strict_mode(self) -> None:
        out = configuration.transform("module.exports = { reactStrictMode: false };", OPTS)
        assert out.code == "module.exports = { reactStrictMode: true };"
        assert out.change_count == 1

    def test_no_config_is_noop(self) -> None:
        out = configuration.transform("var x = 1;", OPTS)
        assert out.code == "var x = 1;"
        assert out.change_count == 0
        assert out.improvements == ()

    def test_detector_matches_rules(self, tsconfig: str) -> None:
        (detector,) = configuration.DETECTORS
        assert detector.fires(tsconfig)
        assert not detector.fires('{"target": "es2020"}')


class TestEntityCleanupLayer:
    def test_decodes_quotes(self) -> None:
        out = entity_cleanup.transform("<p>&quot;Hi&quot;</p>", OPTS)
        assert out.code == '<p>"Hi"</p>'
        assert out.change_count == 2

    @pytest.mark.parametrize("entity", ["&#x27;", "&#39;", "&apos;"])
    def test_decodes_apostrophes(self, entity: str) -> None:
        out = entity_cleanup.transform(f"const s = \"it{entity}s\";", OPTS)
        assert out.code == "const s = \"it's\";"

    def test_decodes_angle_brackets(self) -> None:
        out = entity_cleanup.transform("const s = '&lt;div&gt;';", OPTS)
        assert out.code == "const s = '<div>';"
        assert out.improvements == ("Decoded 2 &lt;/&gt; entities",)

    def test_ampersand_decoded_once(self) -> None:
        out = entity_cleanup.transform("const s = '&amp;quot;';", OPTS)
        assert out.code == "const s = '&quot;';"
        assert out.change_count == 1

    def test_console_log(self) -> None:
        out = entity_cleanup.transform('console.log("x"); myconsole.log("y");', OPTS)
        assert out.code == 'console.debug("x"); myconsole.log("y");'

    def test_var_declarations(self) -> None:
        out = entity_cleanup.transform("var a = 1;\nconst variable = 2;", OPTS)
        assert out.code == "let a = 1;\nconst variable = 2;"
        assert out.change_count == 1

    def test_clean_code_is_noop(self, clean_code: str) -> None:
        out = entity_cleanup.transform(clean_code, OPTS)
        assert out.code == clean_code
        assert out.change_count == 0


class TestComponentsLayer:
    def test_adds_list_key(self, unkeyed_list: str) -> None:
        out = components.transform(unkeyed_list, OPTS)
        assert "items.map((item, index) => <li key={index}>{item.name}</li>)" in out.code
        assert out.change_count == 1
        assert out.improvements == ("Added key props to 1 list items",)

    def test_reuses_existing_index_param(self) -> None:
        out = components.transform("items.map((item, i) => <li>{item}</li>)", OPTS)
        assert out.code == "items.map((item, i) => <li key={i}>{item}</li>)"

    def test_avoids_shadowing_param_named_index(self) -> None:
        out = components.transform("items.map(index => <li>{index}</li>)", OPTS)
        assert out.code == "items.map((index, idx) => <li key={idx}>{index}</li>)"

    def test_parenthesized_multiline_body(self) -> None:
        code = "items.map(item => (\n  <li className=\"row\">{item}</li>\n))"
        out = components.transform(code, OPTS)
        assert '<li key={index} className="row">' in out.code
        assert "(item, index) =>" in out.code

    def test_existing_key_untouched(self) -> None:
        code = "items.map(item => <li key={item.id}>{item.name}</li>)"
        out = components.transform(code, OPTS)
        assert out.code == code
        assert out.change_count == 0

    def test_img_alt(self) -> None:
        out = components.transform('<img src="a.png" />', OPTS)
        assert out.code == '<img alt="" src="a.png" />'
        assert out.improvements == ("Added alt attributes to 1 images",)

    def test_img_with_alt_untouched(self) -> None:
        code = '<img alt="logo" src="a.png">'
        assert components.transform(code, OPTS).change_count == 0

    def test_detectors(self, unkeyed_list: str) -> None:
        keys, alt = components.DETECTORS
        assert keys.pattern == "missing-list-keys"
        assert keys.fires(unkeyed_list)
        assert not alt.fires(unkeyed_list)
        assert not keys.fires("items.map(item => <li key={item}>x</li>)")


class TestHydrationLayer:
    def test_guards_storage(self) -> None:
        out = hydration.transform("localStorage.getItem('x')", OPTS)
        assert out.code == "typeof window !== \"undefined\" && localStorage.getItem('x')"
        assert out.change_count == 1

    def test_session_storage_and_multiple_lines(self) -> None:
        code = "const a = localStorage.getItem('a');\nconst b = sessionStorage.getItem('b');"
        out = hydration.transform(code, OPTS)
        assert out.change_count == 2
        assert out.code.count(hydration.WINDOW_GUARD) == 2

    def test_already_guarded_line_untouched(self) -> None:
        code = "if (typeof window !== 'undefined') localStorage.setItem('a', '1');"
        assert hydration.transform(code, OPTS).code == code

    def test_member_access_untouched(self) -> None:
        code = "window.localStorage.getItem('a');"
        assert hydration.transform(code, OPTS).change_count == 0

    def test_idempotent(self) -> None:
        once = hydration.transform("localStorage.clear();", OPTS).code
        twice = hydration.transform(once, OPTS)
        assert twice.code == once
        assert twice.change_count == 0

    def test_assignment_statement_gets_if_guard(self) -> None:
        out = hydration.transform('localStorage.theme = "dark";\n', OPTS)
        assert out.code == 'if (typeof window !== "undefined") localStorage.theme = "dark";\n'
        assert out.change_count == 1
        assert hydration.transform(out.code, OPTS).change_count == 0

    @pytest.mark.parametrize(
        "code",
        [
            "localStorage.count++;",
            "sessionStorage.total += 2;",
            "localStorage.prefs.theme = v;",
        ],
    )
    def test_other_assignment_statements(self, code: str) -> None:
        out = hydration.transform(code, OPTS)
        assert out.code == hydration.STATEMENT_GUARD + code

    @pytest.mark.parametrize(
        "code",
        [
            'if (!localStorage.getItem("x")) {}',
            "const theme = localStorage.getItem('theme') ?? 'light';",
            "const n = 1 + localStorage.length;",
            "const same = a === localStorage.getItem('a');",
            "const set = () => localStorage.x = 1;",
            "if (ready) localStorage.clear();",
        ],
    )
    def test_unsafe_positions_left_alone(self, code: str) -> None:
        out = hydration.transform(code, OPTS)
        assert out.code == code
        assert out.change_count == 0
        assert not hydration.DETECTORS[0].fires(code)

    @pytest.mark.parametrize(
        "code,expected",
        [
            (
                "return localStorage.getItem('a');",
                "return typeof window !== \"undefined\" && localStorage.getItem('a');",
            ),
            (
                "const ok = ready && localStorage.getItem('a');",
                "const ok = ready && typeof window !== \"undefined\" && localStorage.getItem('a');",
            ),
            (
                "load(localStorage.getItem('a'), 1);",
                "load(typeof window !== \"undefined\" && localStorage.getItem('a'), 1);",
            ),
            (
                "const read = () => localStorage.getItem(key(1)).trim();",
                "const read = () => typeof window !== \"undefined\" && localStorage.getItem(key(1)).trim();",
            ),
        ],
    )
    def test_operand_positions_guarded(self, code: str, expected: str) -> None:
        assert hydration.transform(code, OPTS).code == expected


class TestAppRouterLayer:
    def test_moves_directive_to_top(self) -> None:
        code = "import React from 'react';\n'use client';\n"
        out = app_router.transform(code, OPTS)
        assert out.code == "'use client';\nimport React from 'react';\n"
        assert out.change_count == 1

    def test_keeps_leading_comments_and_quote_style(self) -> None:
        code = "// header\nimport x from 'y';\n\"use client\"\n"
        out = app_router.transform(code, OPTS)
        assert out.code == "// header\n\"use client\";\nimport x from 'y';\n"

    def test_correct_placement_is_noop(self) -> None:
        code = "'use client';\nimport x from 'y';\n"
        out = app_router.transform(code, OPTS)
        assert out.code == code
        assert out.change_count == 0
        assert not app_router.has_misplaced_directive(code)

    def test_duplicates_collapse(self) -> None:
        code = "'use client';\n'use client';\nconst a = 1;\n"
        out = app_router.transform(code, OPTS)
        assert out.code == "'use client';\nconst a = 1;\n"
        assert out.change_count == 2

    def test_no_directive(self, clean_code: str) -> None:
        assert app_router.transform(clean_code, OPTS).code == clean_code
        assert not app_router.has_misplaced_directive(clean_code)
