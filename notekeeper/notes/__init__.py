"""
Note Management Engine.

Note model, notes API gateway, session handling, the confirm-then-apply
note cache, search, the view state machine, and share links, composed by
NotesController.
"""
