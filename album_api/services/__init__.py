# Services package init
"""
Album API — Services Layer
===========================

What:  Data access sitting between routes (HTTP) and the database engine.
How:   Routes depend on the AlbumStore protocol; AlbumService implements it
       with parameterized SQL through the shared Database.

Service Inventory:
    - AlbumStore (protocol): list / get / add / delete / health / close
    - AlbumService: SQL implementation over album_api.database.Database
"""
