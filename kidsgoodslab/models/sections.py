"""Nine-section article layout, tuned per pattern."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Section:
    """One section of the article layout."""

    role: str
    length: str
    guidance: str
    heading_example: str


BASE_SECTIONS: tuple[Section, ...] = (
    Section("導入", "300-400文字", "読者の疑問・悩みを代弁し、結論を先に提示する", "[商品名]って実際どうなの？気になる評判を調べてみた"),
    Section("商品の基本情報", "200-300文字", "価格帯・対象年齢・サイズなど基本スペックを押さえる", "[商品名]はどんな商品？まず押さえたい基本スペック"),
    Section("この記事で分かること", "100-150文字", "読めば分かることを箇条書きで示す", "この記事を読めば分かる3つのこと"),
    Section("事実・データ", "600-800文字", "具体的な数値やスペック、競合との比較を示す", "数字で見る[商品名]の実力"),
    Section("本題", "1500-2000文字", "パターンに特化した詳しい解説。抽象から具体の流れで書く", "口コミを調べて分かった[商品名]の本当の評判"),
    Section("実践アドバイス", "600-800文字", "初心者向けのステップと先輩パパママの知恵", "失敗しないための3ステップ"),
    Section("注意点", "500-700文字", "正直なマイナス面と合わない人・ケース", "買う前に知っておきたい[商品名]の弱点"),
    Section("おすすめな人", "300-400文字", "「これは私向け」と思えるチェックリスト", "[商品名]がハマるのはこんな家庭"),
    Section("結論", "300-400文字", "パターン視点での結論と背中押し", "結局[商品名]は買い？調べて出した答え"),
)

# Replacement guidance for the main section (index 4) per pattern
MAIN_SECTION_BY_PATTERN: dict[str, tuple[str, str]] = {
    "where-to-buy": ("店舗・通販ごとの取り扱い、価格、在庫状況を表形式で整理する", "[商品名]はどこで買える？店舗と通販を徹底調査"),
    "reviews": ("良い口コミ・悪い口コミを分類し、傾向を分析する", "良い口コミ・悪い口コミを100件調べて分かったこと"),
    "lowest-price": ("1個あたり単価、定期便、ポイント還元込みの実質価格を比較する", "実質いくら？[商品名]の最安値ルートを比較"),
    "regret": ("後悔の声をパターン別に整理し、回避策を添える", "[商品名]で後悔した人に共通する3つの落とし穴"),
    "comparison": ("競合商品との比較表を作り、項目ごとに勝ち負けを示す", "[商品名]と人気商品を10項目で比べてみた"),
    "size-check": ("サイズ・重量・設置スペースを数値で示し、車や部屋との相性を検討する", "[商品名]のサイズ感は？設置スペースを実測値で確認"),
    "skin-trouble": ("敏感肌・アトピー肌の口コミと成分から肌へのやさしさを検討する", "敏感肌の赤ちゃんに[商品名]は合う？口コミから検証"),
    "effect": ("月齢・年齢ごとに期待できる知育効果を整理する", "[商品名]で伸びる力はどれ？年齢別に整理"),
    "age-guide": ("対象年齢ごとの遊び方と卒業時期を示す", "何歳から何歳まで？[商品名]の年齢別の楽しみ方"),
    "safety": ("事故の事例と防ぐための装備・見守りポイントを示す", "[商品名]で起こりがちなヒヤリハットと対策"),
    "when-to-start": ("開始時期の目安と月齢別の使い方、量の目安を示す", "[商品名]はいつから？月齢別の使い方早見表"),
    "how-to-use": ("セットアップ手順と便利な使い方を順を追って説明する", "説明書では分からない[商品名]の使いこなし術"),
    "necessity": ("使わなかった人の声と代用品を検討し、必要性を判断する", "[商品名]はなくても困らない？必要な家庭・不要な家庭"),
    "rent-vs-buy": ("レンタルと購入の総額を期間別に比較する", "レンタルと購入、[商品名]はどっちがお得？"),
    "alternative": ("100均などの代用品との違いを具体的に比較する", "100均の類似品と[商品名]は何が違う？"),
    "tips": ("アレンジや工夫のアイデアを具体的に紹介する", "[商品名]をもっと活用するアレンジ術"),
}


def get_section_prompt(pattern_key: str | None, product_name: str) -> str:
    """Render the section layout instructions for a pattern."""
    lines = []
    main = MAIN_SECTION_BY_PATTERN.get(pattern_key or "reviews", MAIN_SECTION_BY_PATTERN["reviews"])

    for i, section in enumerate(BASE_SECTIONS, start=1):
        guidance, example = section.guidance, section.heading_example
        if i == 5:
            guidance, example = main
        example = example.replace("[商品名]", product_name)
        lines.append(f"{i}. {section.role}（{section.length}）")
        lines.append(f"   - {guidance}")
        lines.append(f"   - 見出し例: 「{example}」")
        lines.append("")

    return "\n".join(lines)
