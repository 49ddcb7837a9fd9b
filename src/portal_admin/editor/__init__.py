"""Collection editing state machine."""

from portal_admin.editor.editor import CollectionEditor, EditorMode, EditorState

__all__ = ["CollectionEditor", "EditorMode", "EditorState"]
