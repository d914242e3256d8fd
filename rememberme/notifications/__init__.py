"""Notification scheduling engine (distribution, next-fire calculation, sweep loop).

The HTTP surface lives in `api`/`service`; the standalone timer process in
`worker`. Both share the same engine and database.
"""
