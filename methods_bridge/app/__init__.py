"""Application wiring and the state objects QML binds to."""
