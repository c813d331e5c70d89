import os

import dotenv

from ai_paralegal_sdk import LLM, AiParalegalClient, CancellationToken, LlmRequestOptions, LlmStreamCallbacks

dotenv.load_dotenv()

MAX_CHARS = 200

with AiParalegalClient() as client:
    session = client.start_session(os.environ["AI_PARALEGAL_EXCHANGE_TOKEN"])
    token = CancellationToken()
    received: list[str] = []

    def on_chunk(delta: str) -> None:
        received.append(delta)
        print(delta, end="", flush=True)
        if sum(len(d) for d in received) >= MAX_CHARS:
            token.cancel()

    resp = LLM(client, session.session_token).stream(
        "Write a detailed memo about discovery obligations in civil litigation.",
        options=LlmRequestOptions(temperature=0.2),
        callbacks=LlmStreamCallbacks(on_chunk=on_chunk, on_error=lambda e: print("\nstream error:", e)),
        cancel=token,
    )

print()
print("cancelled" if resp is None else f"completed, usage={resp.data.usage}")
