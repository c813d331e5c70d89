import os
import sys
from pathlib import Path

import dotenv

from ai_paralegal_sdk import OCR, AiParalegalClient, OcrStreamCallbacks

dotenv.load_dotenv()

paths = [Path(p) for p in sys.argv[1:]] or [Path("scan.png")]

with AiParalegalClient() as client:
    session = client.start_session(os.environ["AI_PARALEGAL_EXCHANGE_TOKEN"])

    resp = OCR(client, session.session_token).stream(
        paths,
        callbacks=OcrStreamCallbacks(
            on_chunk=lambda filename, delta: print(delta, end="", flush=True),
            on_file_complete=lambda extraction: print(f"\n--- {extraction.filename} done ---"),
        ),
    )

if resp is not None:
    print(f"{len(resp.data.extractions)} file(s), {len(resp.text)} characters in total")
