"""Minimal LSP server for shellex — diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from shellex import __version__
from shellex.errors import LexProblem
from shellex.lexer import find_problems

server = LanguageServer("shellex-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)

# A lexer fallback never stops highlighting, so nothing is reported as an Error
_SEVERITY = {
    "error": DiagnosticSeverity.Warning,
    "warning": DiagnosticSeverity.Information,
}


def _to_diagnostic(problem: LexProblem) -> Diagnostic:
    start, end = problem.span.start, problem.span.end
    return Diagnostic(
        range=Range(
            start=Position(line=start.line - 1, character=start.column - 1),
            end=Position(line=end.line - 1, character=end.column - 1),
        ),
        message=problem.message,
        severity=_SEVERITY[problem.severity],
        source="shellex",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Lex the document and publish its problems as diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    diagnostics = [_to_diagnostic(p) for p in find_problems(doc.source)]
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
