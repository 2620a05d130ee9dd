"""Landing page with a browser upload form."""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()

INDEX_PATH = Path(__file__).parent.parent / "web" / "static" / "index.html"


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index():
    """Serve the web interface."""
    if INDEX_PATH.exists():
        return HTMLResponse(content=INDEX_PATH.read_text(encoding="utf-8"))
    return HTMLResponse(content="""
    <!DOCTYPE html>
    <html>
    <head>
        <title>Whisper Transcription Service</title>
    </head>
    <body>
        <h1>Whisper Transcription Service</h1>
        <p>POST an audio file as the <code>audio</code> form field to <code>/api/transcribe</code>.</p>
    </body>
    </html>
    """)
