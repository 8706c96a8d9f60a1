"""Deezify - Spotify playlists enriched with Deezer preview audio.

The public entry point is the composition root:

    from deezify import create_container

    async with create_container() as container:
        playlist = await container.music.get_playlist("37i9dQZF1DXcBWIGoYBM5M")
"""

from deezify.infrastructure.factories import AppContainer, create_container

__all__ = ["AppContainer", "create_container"]
