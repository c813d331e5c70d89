import os

import dotenv

from langchain_core.messages import HumanMessage
from ai_paralegal_sdk import AiParalegalClient, ChatAiParalegal

dotenv.load_dotenv()

with AiParalegalClient() as client:
    session = client.start_session(os.environ["AI_PARALEGAL_EXCHANGE_TOKEN"])

model = ChatAiParalegal(session_token=session.session_token, max_tokens=500)

for token in model.stream([HumanMessage(content="Summarize the elements of a valid contract.")]):
    print(token.content, end="", flush=True)
print()
