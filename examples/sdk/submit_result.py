import os

import dotenv

from ai_paralegal_sdk import AiParalegalClient, AskMatterAI, ResultSubmitter

dotenv.load_dotenv()

with AiParalegalClient() as client:
    session = client.start_session(os.environ["AI_PARALEGAL_EXCHANGE_TOKEN"])

    answer = AskMatterAI(client, session.session_token).ask("List the key deadlines in this matter.")
    for ref in answer.data.references:
        print("source:", ref.client_document_name)

    resp = ResultSubmitter(client, session.session_token).submit(
        {"deadlines": answer.data.answer, "sources": [r.client_document_id for r in answer.data.references]}
    )
    print(resp.success, resp.message)
