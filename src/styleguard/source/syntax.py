"""Per-language syntax tables.

Every supported language is a single ``LanguageSyntax`` record; adapters are
generic over these records, so supporting another language means adding an
entry to ``SYNTAXES``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from styleguard.source.models import BlockKind, Visibility

_C_FAMILY_CONTROL = {
    "if": BlockKind.CONDITIONAL,
    "else": BlockKind.CONDITIONAL,
    "for": BlockKind.LOOP,
    "while": BlockKind.LOOP,
    "do": BlockKind.LOOP,
    "switch": BlockKind.SWITCH_CASE,
    "try": BlockKind.TRY,
    "catch": BlockKind.TRY,
    "finally": BlockKind.TRY,
}

_ACCESS_KEYWORDS = {
    "public": Visibility.PUBLIC,
    "protected": Visibility.PROTECTED,
    "private": Visibility.PRIVATE,
}


@dataclass(frozen=True)
class LanguageSyntax:
    """Lexical and structural facts about one language."""

    name: str
    extensions: tuple[str, ...]
    keywords: frozenset[str]
    block_style: str = "braces"
    line_comments: tuple[str, ...] = ("//",)
    block_comments: tuple[tuple[str, str], ...] = (("/*", "*/"),)
    string_quotes: tuple[str, ...] = ('"', "'")
    multiline_quotes: tuple[str, ...] = ()
    string_prefixes: str = ""
    raw_prefixes: str = ""
    raw_quotes: tuple[str, ...] = ()
    identifier_pattern: str = r"[A-Za-z_$][A-Za-z0-9_$]*"
    control_keywords: Mapping[str, BlockKind] = field(
        default_factory=lambda: dict(_C_FAMILY_CONTROL)
    )
    continuation_keywords: frozenset[str] = frozenset({"else", "catch", "finally"})
    class_keywords: frozenset[str] = frozenset({"class", "interface", "enum"})
    modifier_keywords: frozenset[str] = frozenset()
    visibility_keywords: Mapping[str, Visibility] = field(
        default_factory=lambda: dict(_ACCESS_KEYWORDS)
    )
    binding_keywords: frozenset[str] = frozenset()
    type_keywords: frozenset[str] = frozenset()
    constructor_names: frozenset[str] = frozenset()
    return_keywords: frozenset[str] = frozenset({"return"})
    newline_terminates: bool = False
    regex_literals: bool = False
    paren_conditions: bool = True
    name_before_type: bool = False
    underscore_visibility: bool = False
    capitalized_visibility: bool = False


_JAVA_KEYWORDS = frozenset(
    """abstract assert boolean break byte case catch char class const continue
    default do double else enum extends final finally float for goto if
    implements import instanceof int interface long native new package private
    protected public return short static strictfp super switch synchronized
    this throw throws transient try var void volatile while true false null
    record""".split()
)

_JS_KEYWORDS = frozenset(
    """async await break case catch class const continue debugger default
    delete do else export extends finally for function if import in
    instanceof let new of return static super switch this throw try typeof
    var void while with yield true false null""".split()
)

_TS_KEYWORDS = _JS_KEYWORDS | frozenset(
    """abstract declare enum implements interface namespace private protected
    public readonly type""".split()
)

_CSHARP_KEYWORDS = frozenset(
    """abstract as base bool break byte case catch char checked class const
    continue decimal default delegate do double else enum event explicit
    extern false finally fixed float for foreach goto if implicit in int
    interface internal is lock long namespace new null object operator out
    override params private protected public readonly ref return sbyte
    sealed short sizeof static string struct switch this throw true try
    typeof uint ulong unchecked unsafe ushort using var virtual void volatile
    while record async await""".split()
)

_GO_KEYWORDS = frozenset(
    """break case chan const continue default defer else fallthrough for func
    go goto if import interface map package range return select struct
    switch type var true false nil""".split()
)

_C_KEYWORDS = frozenset(
    """auto break case char const continue default do double else enum extern
    float for goto if inline int long register restrict return short signed
    sizeof static struct switch typedef union unsigned void volatile while
    NULL""".split()
)

_PYTHON_KEYWORDS = frozenset(
    """False None True and as assert async await break class continue def del
    elif else except finally for from global if import in is lambda nonlocal
    not or pass raise return try while with yield""".split()
)


SYNTAXES: dict[str, LanguageSyntax] = {
    "java": LanguageSyntax(
        name="java",
        extensions=(".java",),
        keywords=_JAVA_KEYWORDS,
        class_keywords=frozenset({"class", "interface", "enum", "record"}),
        modifier_keywords=frozenset(
            """static final abstract synchronized native transient volatile
            strictfp default""".split()
        ),
        type_keywords=frozenset(
            "boolean byte char short int long float double void var".split()
        ),
    ),
    "javascript": LanguageSyntax(
        name="javascript",
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        keywords=_JS_KEYWORDS,
        string_quotes=('"', "'", "`"),
        multiline_quotes=("`",),
        identifier_pattern=r"#?[A-Za-z_$][A-Za-z0-9_$]*",
        class_keywords=frozenset({"class"}),
        modifier_keywords=frozenset({"static", "async", "export", "default"}),
        visibility_keywords={},
        binding_keywords=frozenset({"var", "let", "const"}),
        constructor_names=frozenset({"constructor"}),
        newline_terminates=True,
        regex_literals=True,
    ),
    "typescript": LanguageSyntax(
        name="typescript",
        extensions=(".ts", ".tsx", ".mts", ".cts"),
        keywords=_TS_KEYWORDS,
        string_quotes=('"', "'", "`"),
        multiline_quotes=("`",),
        identifier_pattern=r"#?[A-Za-z_$][A-Za-z0-9_$]*",
        class_keywords=frozenset({"class", "interface", "enum"}),
        modifier_keywords=frozenset(
            {"static", "async", "export", "default", "readonly", "abstract", "declare"}
        ),
        binding_keywords=frozenset({"var", "let", "const"}),
        constructor_names=frozenset({"constructor"}),
        newline_terminates=True,
        regex_literals=True,
    ),
    "csharp": LanguageSyntax(
        name="csharp",
        extensions=(".cs",),
        keywords=_CSHARP_KEYWORDS,
        string_prefixes="@$",
        raw_prefixes="@",
        control_keywords={**_C_FAMILY_CONTROL, "foreach": BlockKind.LOOP},
        class_keywords=frozenset({"class", "interface", "enum", "struct", "record"}),
        modifier_keywords=frozenset(
            """static readonly const abstract sealed virtual override async
            extern unsafe volatile partial""".split()
        ),
        visibility_keywords={**_ACCESS_KEYWORDS, "internal": Visibility.PROTECTED},
        type_keywords=frozenset(
            """bool byte sbyte char decimal double float int uint long ulong
            short ushort object string var dynamic void""".split()
        ),
    ),
    "go": LanguageSyntax(
        name="go",
        extensions=(".go",),
        keywords=_GO_KEYWORDS,
        string_quotes=('"', "'", "`"),
        multiline_quotes=("`",),
        raw_quotes=("`",),
        control_keywords={
            "if": BlockKind.CONDITIONAL,
            "else": BlockKind.CONDITIONAL,
            "for": BlockKind.LOOP,
            "switch": BlockKind.SWITCH_CASE,
            "select": BlockKind.SWITCH_CASE,
        },
        continuation_keywords=frozenset({"else"}),
        class_keywords=frozenset({"struct", "interface"}),
        visibility_keywords={},
        binding_keywords=frozenset({"var", "const"}),
        newline_terminates=True,
        paren_conditions=False,
        name_before_type=True,
        capitalized_visibility=True,
    ),
    "c": LanguageSyntax(
        name="c",
        extensions=(".c", ".h"),
        keywords=_C_KEYWORDS,
        line_comments=("//", "#"),
        control_keywords={
            k: v for k, v in _C_FAMILY_CONTROL.items() if k not in ("try", "catch", "finally")
        },
        continuation_keywords=frozenset({"else"}),
        class_keywords=frozenset({"struct", "union", "enum"}),
        modifier_keywords=frozenset(
            "static extern const volatile register inline restrict auto".split()
        ),
        visibility_keywords={},
        type_keywords=frozenset(
            """char short int long float double void signed unsigned struct
            union enum""".split()
        ),
    ),
    "python": LanguageSyntax(
        name="python",
        extensions=(".py", ".pyi"),
        keywords=_PYTHON_KEYWORDS,
        block_style="indent",
        line_comments=("#",),
        block_comments=(),
        string_quotes=('"""', "'''", '"', "'"),
        multiline_quotes=('"""', "'''"),
        string_prefixes="rRbBfFuU",
        identifier_pattern=r"[A-Za-z_][A-Za-z0-9_]*",
        control_keywords={
            "if": BlockKind.CONDITIONAL,
            "elif": BlockKind.CONDITIONAL,
            "else": BlockKind.CONDITIONAL,
            "for": BlockKind.LOOP,
            "while": BlockKind.LOOP,
            "try": BlockKind.TRY,
            "except": BlockKind.TRY,
            "finally": BlockKind.TRY,
            "with": BlockKind.OTHER,
            "match": BlockKind.SWITCH_CASE,
            "case": BlockKind.OTHER,
        },
        continuation_keywords=frozenset({"elif", "else", "except", "finally"}),
        class_keywords=frozenset({"class"}),
        visibility_keywords={},
        constructor_names=frozenset({"__init__"}),
        underscore_visibility=True,
    ),
}

_EXTENSIONS: dict[str, str] = {
    ext: syntax.name for syntax in SYNTAXES.values() for ext in syntax.extensions
}


def detect_language(path: str | Path) -> str | None:
    """Map a file path to a language identifier by extension."""
    return _EXTENSIONS.get(Path(path).suffix.lower())


def get_syntax(language: str) -> LanguageSyntax:
    try:
        return SYNTAXES[language]
    except KeyError:
        raise KeyError(f"Unsupported language: {language}") from None
