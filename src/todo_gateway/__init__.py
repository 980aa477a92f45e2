"""
Todo Gateway package.

A small FastAPI application rendering a todo list page and the htmx
fragments that update it, backed by a Supabase table.

Run with an ASGI server using the app factory, for example:

    uvicorn --factory todo_gateway.main:create_app
"""
