import asyncio
import json
import logging
from pathlib import Path
from uuid import uuid4

from starlette.applications import Starlette
from starlette.routing import Route, WebSocketRoute, Mount
from starlette.staticfiles import StaticFiles
from starlette.responses import Response
from starlette.websockets import WebSocketDisconnect

from .document import Document
from .html import SafeText, html_children, html_diff, html_parts


logger = logging.getLogger(__name__)

DOCTYPE = SafeText('<!doctype html>')
SCRIPT_BEFORE, SCRIPT_AFTER = (
    Path(__file__).parent.joinpath('app.js')
    .read_text().split('{{socket_url}}')
)


def wrap(result, script):
    try:
        page, = html_children(result)
    except ValueError:
        page = None
    if not isinstance(page, tuple) or page[0] != 'html':
        raise ValueError('markup should consist of one html element')

    _, props, *_ = page
    children = list(html_children(page))

    for index, child in enumerate(children):
        if isinstance(child, tuple) and child[0] == 'head':
            children[index] = (*child, script)
            break
    else:
        raise ValueError('markup should have a head')

    return (None, {}, ('html', props, *children))


class Tally(Starlette):

    def __init__(
        self, markup, main, *,
        debug=False,
        static_path=None,
        static_route='/static',
        session_timeout=5,
        lifespan=None,
    ):
        routes = []

        if static_path is not None:
            routes.append(Mount(
                static_route,
                app=StaticFiles(directory=static_path),
            ))

        routes.append(Route(
            '/{path:path}',
            endpoint=self._http,
            methods=['GET'],
            name='http',
        ))
        routes.append(WebSocketRoute(
            '/{session_id:uuid}',
            endpoint=self._websocket,
            name='websocket',
        ))

        super().__init__(
            debug=debug,
            routes=routes,
            lifespan=lifespan,
        )

        self._markup = markup
        self._main = main
        self._session_timeout = session_timeout
        self._sessions = {}

    def create_document(self):
        document = Document(self._markup)
        self._main(document)
        return document

    async def _http(self, request):
        document = self.create_document()

        session_id = uuid4()
        socket_url = request.url_for('websocket', session_id=session_id)
        script = ('script', {}, SafeText(
            SCRIPT_BEFORE + json.dumps(str(socket_url)) + SCRIPT_AFTER
        ))
        result = wrap(document.result, script)

        self._sessions[session_id] = (document, script)
        logger.debug(f'Created session {session_id}')

        def session_timeout():
            try:
                del self._sessions[session_id]
            except KeyError:
                return
            logger.debug(f'Session {session_id} expired')
            document.close()

        loop = asyncio.get_running_loop()
        loop.call_later(self._session_timeout, session_timeout)

        return Response(
            ''.join(html_parts((None, {}, DOCTYPE, *result[2:]))),
            media_type='text/html',
            headers={'connection': 'keep-alive'},
        )

    async def _websocket(self, socket):
        session_id = socket.path_params['session_id']
        try:
            document, script = self._sessions.pop(session_id)
        except KeyError:
            await socket.close()
            return

        await socket.accept()
        logger.debug(f'Session {session_id} connected')

        result = wrap(document.result, script)
        try:
            while True:
                event_type, *path, details = await socket.receive_json()
                document.dispatch(path, event_type, details)

                new_result = wrap(document.result, script)
                actions = list(html_diff(result, new_result))
                result = new_result

                if actions:
                    await socket.send_text(json.dumps(
                        actions,
                        separators=(',', ':'),
                    ))
        except WebSocketDisconnect:
            logger.debug(f'Session {session_id} disconnected')
        finally:
            document.close()
