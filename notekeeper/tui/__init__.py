"""
Terminal User Interface.

Textual application over NotesController.
"""
