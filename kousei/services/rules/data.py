"""Dictionaries for the dictionary-driven rules.

Each variant tuple lists the standard form first; it wins ties.
"""
from typing import Dict, List, Tuple

# era -> offset such that western year = offset + era year
ERA_OFFSETS: Dict[str, int] = {
    "令和": 2018,
    "平成": 1988,
    "昭和": 1925,
    "大正": 1911,
    "明治": 1867,
}

# wrong -> right, loanwords spelled with a repeated vowel instead of ー
LONG_VOWEL_KANA: Dict[str, str] = {
    "エラア": "エラー",
    "コンピュータア": "コンピューター",
    "プリンタア": "プリンター",
    "スキャナア": "スキャナー",
    "モニタア": "モニター",
    "サーバア": "サーバー",
    "フォルダア": "フォルダー",
    "コーヒイ": "コーヒー",
    "タクシイ": "タクシー",
    "パーティイ": "パーティー",
    "ストーリイ": "ストーリー",
    "ボディイ": "ボディー",
}

KATAKANA_VOWEL_REPEATS: Dict[str, str] = {
    "アア": "アー",
    "イイ": "イー",
    "ウウ": "ウー",
    "エエ": "エー",
    "オオ": "オー",
    "ラア": "ラー",
    "リイ": "リー",
    "ルウ": "ルー",
    "レエ": "レー",
    "ロオ": "ロー",
}

# words containing の that are not the particle の; masked before counting
NO_EXCEPTIONS: List[str] = ["このまま", "そのまま", "あのまま", "ものの", "もの", "この", "その", "あの", "どの"]

RA_NUKI_STEMS: List[str] = [
    "見", "食べ", "出", "着", "起き", "寝", "落ち", "逃げ",
    "受け", "開け", "つけ", "やめ", "考え", "答え", "決め", "始め",
]
RA_NUKI_SUFFIXES: List[str] = ["れる", "れない", "れた", "れれば", "れます", "れました", "れません"]

SA_IRE: Dict[str, str] = {
    "休まさせる": "休ませる",
    "読まさせる": "読ませる",
    "行かさせる": "行かせる",
    "書かさせる": "書かせる",
    "飲まさせる": "飲ませる",
    "待たさせる": "待たせる",
    "泣かさせる": "泣かせる",
}

I_NUKI: Dict[str, str] = {
    "持ってる": "持っている",
    "食べてる": "食べている",
    "見てる": "見ている",
    "走ってる": "走っている",
    "読んでる": "読んでいる",
    "遊んでる": "遊んでいる",
    "待ってる": "待っている",
    "歩いてる": "歩いている",
    "飲んでる": "飲んでいる",
    "寝てる": "寝ている",
}

# redundant -> (concise, why)
REDUNDANT: Dict[str, Tuple[str, str]] = {
    "頭痛が痛い": ("頭が痛い", "「頭痛」に「痛い」の意味が含まれています"),
    "一番最初": ("最初", "「一番」と「最初」は同じ意味です"),
    "まず最初に": ("まず", "「まず」と「最初に」は同じ意味です"),
    "後で後悔": ("後悔", "「後悔」に「後で」の意味が含まれています"),
    "犯罪を犯す": ("罪を犯す", "「犯罪」と「犯す」で意味が重複しています"),
    "返事を返す": ("返事をする", "「返事」と「返す」で意味が重複しています"),
    "被害を被る": ("被害を受ける", "「被害」と「被る」で意味が重複しています"),
    "違和感を感じる": ("違和感がある", "「違和感」と「感じる」で意味が重複しています"),
    "馬から落馬": ("落馬する", "「落馬」に「馬から落ちる」の意味が含まれています"),
    "日本に来日": ("来日する", "「来日」に「日本に来る」の意味が含まれています"),
    "歌を歌う": ("歌う", "「歌」と「歌う」で意味が重複しています"),
    "挙式を挙げる": ("挙式する", "「挙式」と「挙げる」で意味が重複しています"),
    "過半数を超える": ("半数を超える", "「過半数」に「超える」の意味が含まれています"),
    "必ず必要": ("必要", "「必ず」と「必要」で意味が重複しています"),
    "各々それぞれ": ("それぞれ", "「各々」と「それぞれ」は同じ意味です"),
    "あらかじめ予約": ("予約する", "「予約」に「あらかじめ」の意味が含まれています"),
    "今の現状": ("現状", "「今の」と「現状」で意味が重複しています"),
    "元旦の朝": ("元旦", "「元旦」に「朝」の意味が含まれています"),
    "最後の切り札": ("切り札", "「切り札」に「最後の」の意味が含まれています"),
    "射程距離": ("射程", "「射程」に「距離」の意味が含まれています"),
    "思いがけないハプニング": ("ハプニング", "「ハプニング」に「思いがけない」の意味が含まれています"),
    "内定が決まる": ("内定する", "「内定」に「決まる」の意味が含まれています"),
    "旅行に行く": ("旅行する", "「旅行」と「行く」で意味が重複しています"),
}

_DOUBLE_NEGATIVE = "二重否定は分かりにくいため、肯定表現が推奨されます"

# verbose -> (concise, why)
VERBOSE: Dict[str, Tuple[str, str]] = {
    "することができる": ("できる", "「することができる」は「できる」で十分です"),
    "することが可能": ("できる", "「することが可能」は「できる」で十分です"),
    "することが出来る": ("できる", "「することが出来る」は「できる」で十分です"),
    "というふうに": ("と", "「というふうに」は「と」で十分です"),
    "という風に": ("と", "「という風に」は「と」で十分です"),
    "ということができる": ("と言える", "より簡潔に表現できます"),
    "というものは": ("は", "「というものは」は冗長です"),
    "できないわけではない": ("できる", _DOUBLE_NEGATIVE),
    "ないわけではない": ("ある", _DOUBLE_NEGATIVE),
    "なくはない": ("ある", _DOUBLE_NEGATIVE),
    "ないことはない": ("ある", _DOUBLE_NEGATIVE),
    "しないでもない": ("することもある", _DOUBLE_NEGATIVE),
    "と言っても過言ではない": ("と言える", "より簡潔に表現できます"),
    "といっても過言ではない": ("といえる", "より簡潔に表現できます"),
    "において": ("で", "「において」は「で」で十分な場合が多いです"),
    "における": ("の", "「における」は「の」で十分な場合が多いです"),
    "についてですが": ("について", "「ですが」は不要です"),
    "行うことにする": ("行う", "より簡潔に表現できます"),
    "であるということ": ("であること", "「という」は冗長です"),
    "かどうかということ": ("かどうか", "「ということ」は冗長です"),
    "ようにする": ("する", "「ようにする」は冗長な場合があります"),
    "的に言えば": ("的には", "より簡潔に表現できます"),
}

VARIANT_CATEGORY_LABELS: Dict[str, str] = {
    "okurigana": "送り仮名",
    "kanji-kana": "漢字・かな",
    "katakana-chouon": "カタカナ長音",
}

# (group id, category, variants)
NOTATION_VARIANTS: List[Tuple[str, str, Tuple[str, ...]]] = [
    ("uchiawase", "okurigana", ("打ち合わせ", "打合せ", "打合わせ", "打ち合せ")),
    ("uketsuke", "okurigana", ("受け付け", "受付", "受付け", "受け付")),
    ("toriatsukai", "okurigana", ("取り扱い", "取扱い", "取扱")),
    ("moushikomi", "okurigana", ("申し込み", "申込み", "申込")),
    ("hikiwatashi", "okurigana", ("引き渡し", "引渡し", "引渡")),
    ("kumiawase", "okurigana", ("組み合わせ", "組合せ", "組合わせ")),
    ("warikomi", "okurigana", ("割り込み", "割込み", "割込")),
    ("tachiai", "okurigana", ("立ち会い", "立会い", "立会")),
    ("kumitate", "okurigana", ("組み立て", "組立て", "組立")),
    ("okonau", "okurigana", ("行う", "行なう")),
    ("arawasu", "okurigana", ("表す", "表わす")),
    ("kurikaeshi", "okurigana", ("繰り返し", "繰返し", "繰返")),
    ("moushide", "okurigana", ("申し出", "申出")),
    ("uketori", "okurigana", ("受け取り", "受取り", "受取")),
    ("kirikae", "okurigana", ("切り替え", "切替え", "切替")),
    ("kodomo", "kanji-kana", ("子供", "子ども", "こども")),
    ("dekiru", "kanji-kana", ("出来る", "できる")),
    ("kudasai", "kanji-kana", ("下さい", "ください")),
    ("itadaku", "kanji-kana", ("頂く", "いただく")),
    ("arigatou", "kanji-kana", ("有り難う", "ありがとう")),
    ("sugu", "kanji-kana", ("直ぐ", "すぐ")),
    ("subete", "kanji-kana", ("全て", "すべて")),
    ("osoraku", "kanji-kana", ("恐らく", "おそらく")),
    ("samazama", "kanji-kana", ("様々", "さまざま")),
    ("nazenara", "kanji-kana", ("何故なら", "なぜなら")),
    ("oyobi", "kanji-kana", ("及び", "および")),
    ("narabini", "kanji-kana", ("並びに", "ならびに")),
    ("aruiwa", "kanji-kana", ("或いは", "あるいは")),
    ("computer", "katakana-chouon", ("コンピューター", "コンピュータ")),
    ("server", "katakana-chouon", ("サーバー", "サーバ")),
    ("printer", "katakana-chouon", ("プリンター", "プリンタ")),
    ("browser", "katakana-chouon", ("ブラウザー", "ブラウザ")),
    ("user", "katakana-chouon", ("ユーザー", "ユーザ")),
    ("folder", "katakana-chouon", ("フォルダー", "フォルダ")),
    ("parameter", "katakana-chouon", ("パラメーター", "パラメータ")),
    ("manager", "katakana-chouon", ("マネージャー", "マネージャ")),
    ("adapter", "katakana-chouon", ("アダプター", "アダプタ")),
    ("calendar", "katakana-chouon", ("カレンダー", "カレンダ")),
    ("character", "katakana-chouon", ("キャラクター", "キャラクタ")),
    ("elevator", "katakana-chouon", ("エレベーター", "エレベータ")),
    ("editor", "katakana-chouon", ("エディター", "エディタ")),
    ("monitor", "katakana-chouon", ("モニター", "モニタ")),
    ("scanner", "katakana-chouon", ("スキャナー", "スキャナ")),
    ("router", "katakana-chouon", ("ルーター", "ルータ")),
    ("driver", "katakana-chouon", ("ドライバー", "ドライバ")),
    ("filter", "katakana-chouon", ("フィルター", "フィルタ")),
    ("header", "katakana-chouon", ("ヘッダー", "ヘッダ")),
    ("footer", "katakana-chouon", ("フッター", "フッタ")),
    ("buffer", "katakana-chouon", ("バッファー", "バッファ")),
    ("trigger", "katakana-chouon", ("トリガー", "トリガ")),
    ("container", "katakana-chouon", ("コンテナー", "コンテナ")),
    ("counter", "katakana-chouon", ("カウンター", "カウンタ")),
]

# katakana reading -> surface variants
ADVERB_VARIANTS: Dict[str, Tuple[str, ...]] = {
    "マッタク": ("全く", "まったく"),
    "ホトンド": ("殆ど", "ほとんど"),
    "タダチニ": ("直ちに", "ただちに"),
    "アラカジメ": ("予め", "あらかじめ"),
    "スデニ": ("既に", "すでに"),
    "オソラク": ("恐らく", "おそらく"),
    "タトエバ": ("例えば", "たとえば"),
    "カナラズシモ": ("必ずしも", "かならずしも"),
    "カナラズ": ("必ず", "かならず"),
    "ワズカ": ("僅か", "わずか"),
    "サラニ": ("更に", "さらに"),
    "モットモ": ("最も", "もっとも"),
    "トクニ": ("特に", "とくに"),
    "オオイニ": ("大いに", "おおいに"),
    "フタタビ": ("再び", "ふたたび"),
    "ヤハリ": ("矢張り", "やはり", "やっぱり"),
    "タブン": ("多分", "たぶん"),
    "イッソウ": ("一層", "いっそう"),
    "キワメテ": ("極めて", "きわめて"),
    "オモニ": ("主に", "おもに"),
    "スコシ": ("少し", "すこし"),
    "ヒジョウニ": ("非常に", "ひじょうに"),
    "ジツニ": ("実に", "じつに"),
    "マサニ": ("正に", "まさに"),
    "ケッシテ": ("決して", "けっして"),
    "アエテ": ("敢えて", "あえて"),
}
