import motor.motor_asyncio
from config import MONGO_URL, DATABASE_NAME
from document_store import DocumentStore

client = motor.motor_asyncio.AsyncIOMotorClient(MONGO_URL)
db = client[DATABASE_NAME]
store = DocumentStore(db)
