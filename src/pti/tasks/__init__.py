"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Pomodoro, Category, Database)
- task_store.py / category_registry.py: mutations on the aggregate
- pomodoro.py: the shared pomodoro session engine
- task_view.py: ordered, filtered projections for display
- task_codec.py / task_storage.py: JSON document + file persistence
- task_api.py: host helpers (selection, autosave flag, seed data)
- pomodoro_ticker.py: periodic expiry sweep + autosave loop
"""
