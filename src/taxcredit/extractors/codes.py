"""Code tables printed on Korean corporate tax forms."""

# 세액공제조정명세서 line codes
TAX_CREDIT_CODES: dict[str, str] = {
    "131": "중소기업 등 투자세액공제",
    "14Z": "상생결제 지급금액에 대한 세액공제",
    "14M": "대중소기업상생협력을위한기금출연세액공제",
    "18D": "협력중소기업에 대한 유형고정자산 무상임대 세액공제",
    "18L": "수탁기업에 설치하는 시설에 대한 세액공제",
    "18R": "교육기관에 무상 기증하는 중고자산에 대한 세액공제",
    "16A": "신성장ㆍ원천기술 연구개발비세액공제(최저한세 적용제외)",
    "10D": "국가전략기술 연구개발비세액공제(최저한세 적용제외)",
    "16B": "일반 연구ㆍ인력개발비세액공제(최저한세 적용제외)",
    "13L": "신성장ㆍ원천기술 연구개발비세액공제(최저한세 적용대상)",
    "10E": "국가전략기술 연구개발비세액공제(최저한세 적용대상)",
    "13M": "일반 연구ㆍ인력개발비세액공제(최저한세 적용대상)",
    "176": "기술취득에대한세액공제",
    "14T": "기술혁신형 합병에 대한 세액공제",
    "14U": "기술혁신형 주식취득에 대한 세액공제",
    "18E": "벤처기업등 출자에 대한 세액공제",
    "18H": "성과공유 중소기업 경영성과급 세액공제",
    "134": "연구ㆍ인력개발설비투자세액공제",
    "177": "에너지절약시설투자세액공제",
    "14A": "환경보전시설 투자세액공제",
    "142": "근로자복지증진시설투자세액공제",
    "136": "안전시설투자세액공제",
    "135": "생산성향상시설투자세액공제",
    "14B": "의약품품질관리시설투자세액공제",
    "18B": "신성장기술 사업화를 위한 시설투자 세액공제",
    "18C": "영상콘텐츠 제작비용에 대한 세액공제",
    "18I": "초연결 네트워크 시설투자에 대한 세액공제",
    "14N": "고용창출투자세액공제",
    "14S": "산업수요맞춤형고교등졸업자복직중소기업세액공제",
    "14X": "경력단절 여성 고용 기업 등에 대한 세액공제",
    "18J": "육아휴직 후 고용유지 기업에 대한 인건비 세액공제",
    "14Y": "근로소득을 증대시킨 기업에 대한 세액공제",
    "18A": "청년고용을 증대시킨 기업에 대한 세액공제",
    "18F": "고용을 증대시킨 기업에 대한 세액공제",
    "18S": "통합고용세액공제",
    "1B4": "통합고용세액공제(정규직 전환)",
    "1B5": "통합고용세액공제(육아휴직 복귀)",
    "14H": "정규직근로자전환세액공제",
    "18K": "고용유지중소기업에 대한 세액공제",
    "14Q": "중소기업고용증가인원에대한사회보험료세액공제",
    "18G": "중소기업 사회보험 신규가입에 대한 사회보험료 세액공제",
    "184": "전자신고에대한세액공제(납세의무자)",
    "14J": "전자신고에대한세액공제(세무법인등)",
    "14E": "제3자물류비용세액공제",
    "14I": "대학맞춤형교육비용등세액공제",
    "14K": "대학등기부설비에대한세액공제",
    "14O": "기업의운동경기부설치운영비용세액공제",
    "14R": "산업수요맞춤형고교등재학생현장훈련수당세액공제",
    "14P": "석유제품전자상거래에대한세액공제",
    "14V": "금 현물시장에서 거래되는 금지금에 대한 과세특례",
    "14W": "금사업자와 스크랩등사업자의 수입금액의 증가 등에 대한 세액공제",
    "10A": "성실신고 확인비용에 대한 세액공제",
    "18M": "우수 선화주 인증받은 국제물류주선업자에 대한 세액공제",
    "10C": "용역제공자에 관한 과세자료의 제출에 대한 세액공제",
    "18N": "소재·부품·장비 수요기업 공동출자 세액공제",
    "18P": "소재·부품·장비 외국법인 인수세액공제",
    "10B": "상가임대료를 인하한 임대사업자에 대한 세액공제",
    "18Q": "선결제 금액에 대한 세액공제",
    "13W": "통합투자세액공제(일반)",
    "1B1": "임시통합투자세액공제(일반)",
    "13X": "통합투자세액공제(신성장·원천기술)",
    "1B2": "임시통합투자세액공제(신성장·원천기술)",
    "13Y": "통합투자세액공제(국가전략기술)",
    "1B3": "임시통합투자세액공제(국가전략기술)",
}

# Footer code after which the credit statement holds no more credit lines
TAX_CREDIT_FOOTER_CODE = "1A1"

# 주식등변동상황명세서 relation codes kept for related-party checks
RELATION_CODES: dict[str, str] = {
    "00": "본인(최대주주)",
    "01": "배우자",
    "02": "자",
    "03": "부모",
    "04": "형제·자매",
    "05": "손",
    "06": "조부모",
    "07": "02~06의 배우자",
    "08": "01~07 이외의 친족",
}
