# Routes package init
"""
Album API — Routes Package
===========================

Route Inventory:
    - root.py:    GET  /                  (greeting)
    - albums.py:  GET  /albums            (list albums)
                  GET  /albums/{id}       (get one album)
                  POST /albums            (add an album)
                  DELETE /albums/{id}     (delete an album)
    - health.py:  GET  /health            (database health check)

Routes are thin: they parse the request, call the AlbumStore and return.
Error translation lives in the exception handlers in main.py.
"""
