"""Minimal LSP server for DrawLang: diagnostics only."""

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

from drawlang import errors
from drawlang.context import Context
from drawlang.parser import parse
from drawlang.semantic import Analyzer

server = LanguageServer("drawlang-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)

_SEVERITY = {
    errors.Severity.ERROR: DiagnosticSeverity.Error,
    errors.Severity.WARNING: DiagnosticSeverity.Warning,
}


def to_lsp(record: errors.Diagnostic) -> Diagnostic:
    """Convert a diagnostic to LSP form (0-based, spanning the lexeme)."""
    line = record.location.line - 1
    col = record.location.column - 1
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=col),
            end=Position(line=line, character=col + max(1, len(record.lexeme))),
        ),
        message=record.message,
        severity=_SEVERITY[record.severity],
        source="drawlang",
    )


def collect(source: str, filename: str) -> list[Diagnostic]:
    """Parse and check *source*, returning its diagnostics."""
    context = Context()
    result = parse(source, filename, context=context)
    # Loops are checked, never iterated
    Analyzer(context).check(result.program)
    return [to_lsp(d) for d in context.diagnostics.records]


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the DrawLang pipeline and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=collect(doc.source, filename))
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
