"""Editor-widget boundary; the Textual app itself lives in ``app``."""

from .controller import DocumentEditorAdapter, EditorUIHooks, PendingValidation

__all__ = ["DocumentEditorAdapter", "EditorUIHooks", "PendingValidation"]
