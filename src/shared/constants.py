"""
공유 상수 정의

측지계 코드, Web版 TKY2JGD 프로토콜 고정값, GPX/GPSe 포맷 상수 등
프로젝트 전역에서 사용되는 불변 값들을 중앙 관리합니다.
"""

# ─── 측지계 (Geodetic Datums) ─────────────────────────────
EPSG_TOKYO = "EPSG:4301"          # 日本測地系 (Tokyo datum, Bessel 1841)
EPSG_JGD2000 = "EPSG:4612"        # 世界測地系 JGD2000 (GRS80)

# ─── Web版 TKY2JGD 프로토콜 ───────────────────────────────
SUBMIT_PATH = "tky2jgd_csv.php"   # Step 1: 파일 업로드 (POST)
TRIGGER_PATH = "tky2jgd_csv.pl"   # Step 2: 계산 실행 → 302
DOWNLOAD_PATH = "csvdown.php"     # Step 4: 결과 다운로드

SOKUTI_TOKYO_TO_JGD = 1           # "日本測地系 → 世界測地系"
PLACE_LATLON = 0                  # "緯度・経度 → 緯度・経度"
ZONE_NONE = 0                     # 緯度経度 모드에서는 평면직각좌표 계 번호 미사용
ECHO_INPUT_OFF = "off"            # "入力値を出力する" (step 1 form 값)
ECHO_INPUT_FLAG = 0               # 같은 플래그의 step 2 query 값

INPUT_FILENAME = "latlons.in"
OUTPUT_SUFFIX = ".out"

RESULT_COMMENT_MARKER = "#"

# ─── 좌표 포맷 ────────────────────────────────────────────
DMS_SECONDS_PLACES = 5            # DDDMMSS.sssss 의 초 소수 자릿수
DEGREE_PLACES = 8                 # 십진 도 출력 자릿수

# ─── GPX / GPSe ───────────────────────────────────────────
GPX_NS_11 = "http://www.topografix.com/GPX/1/1"
GPX_NS_10 = "http://www.topografix.com/GPX/1/0"
GPSE_ENCODING = "shift_jis"
GPSE_NEWLINE = "\r"
GPSE_HEADER_LINES = 5
GPSE_TRACK_NAME = "My Track"
GPSE_UTC_OFFSET_H = 9             # GPSe 시각은 JST 로 간주

# ─── 서버 설정 ────────────────────────────────────────────
DEV_PORT = 8000                    # 로컬 개발 포트 (PORT 환경변수 우선)
