"""Lexer for the csvdb command language."""

import ply.lex as lex

_STRING_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}


def _unescape(text: str) -> str:
    out = []
    chars = iter(text)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            out.append(_STRING_ESCAPES.get(nxt, nxt))
        else:
            out.append(ch)
    return "".join(out)


class CommandLexer:
    """Lexer for tokenizing csvdb commands."""

    # Reserved keywords
    reserved = {
        "show": "SHOW",
        "tables": "TABLES",
        "describe": "DESCRIBE",
        "create": "CREATE",
        "or": "OR",
        "replace": "REPLACE",
        "table": "TABLE",
        "drop": "DROP",
        "alter": "ALTER",
        "add": "ADD",
        "column": "COLUMN",
        "at": "AT",
        "rename": "RENAME",
        "to": "TO",
        "insert": "INSERT",
        "into": "INTO",
        "values": "VALUES",
        "upsert": "UPSERT",
        "where": "WHERE",
        "and": "AND",
        "select": "SELECT",
        "from": "FROM",
        "delete": "DELETE",
        "row": "ROW",
        "update": "UPDATE",
        "set": "SET",
        "save": "SAVE",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "NUMBER",
        "STRING",
        "STAR",
        "COMMA",
        "LPAREN",
        "RPAREN",
        "LBRACE",
        "RBRACE",
        "EQ",
        "NEQ",
        "LT",
        "LTE",
        "GT",
        "GTE",
        "SEMICOLON",
    ] + list(reserved.values())

    # Simple tokens
    t_STAR = r"\*"
    t_COMMA = r","
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_EQ = r"="
    t_NEQ = r"!="
    t_LTE = r"<="
    t_LT = r"<"
    t_GTE = r">="
    t_GT = r">"
    t_SEMICOLON = r";"

    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"--[^\n]*"
        pass

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"[+-]?[0-9][0-9A-Za-z_.:/+\-]*"
        # Kept as text: numbers, dates and times are typed by the value codec
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"'
        t.value = _unescape(t.value[1:-1])
        return t

    def t_BACKTICK_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"`[^`]+`"
        # Backticks bypass keyword lookup
        t.value = t.value[1:-1]
        t.type = "IDENTIFIER"
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
