"""labfile — 문제/풀이/실행 결과 레코드를 DOCX 문서로 조립한다."""
