"""UI-state layer for the Jobify client.

The state tree, its reducer and store, transient alerts, and the app object
whose dispatchers the views call. Nothing here renders; views subscribe to
the store and read `AppState`.
"""
