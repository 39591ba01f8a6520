from dotenv import load_dotenv
import os

load_dotenv()

LABFILE_RECORDS_PATH: str = os.getenv("LABFILE_RECORDS_PATH", "output.json")
LABFILE_OUTPUT_PATH: str = os.getenv("LABFILE_OUTPUT_PATH", "Labfile.docx")

# 페이지 푸터 (문서 전체 공통)
FOOTER_TEXT: str = os.getenv("LABFILE_FOOTER_TEXT", "Made by H")
FOOTER_SIZE: str = os.getenv("LABFILE_FOOTER_SIZE", "10pt")
