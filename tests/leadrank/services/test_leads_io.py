"""Tests for leadrank.services.leads_io — CSV seed, listing and top-N export."""
import csv
import io

import pytest

from leadrank.models.lead import Lead
from leadrank.models.ranking_result import RankingResult
from leadrank.models.ranking_run import RankingRun
from leadrank.ranking.errors import LeadImportError, RankingInputError, RunNotFoundError
from leadrank.services.leads_io import (
    EXPORT_HEADERS, INSERT_CHUNK, export_top_leads_csv, import_leads_csv,
    list_leads, load_default_csv, parse_leads_csv, top_leads_per_company,
)

HEADER = ('account_name,lead_first_name,lead_last_name,lead_job_title,'
          'account_domain,account_employee_range,account_industry\n')


class TestParseLeadsCsv:

    def test_trims_and_fills_missing_columns(self):
        text = 'account_name, lead_job_title \n  Acme  ,  VP of Sales \n'
        assert parse_leads_csv(text) == [{
            'account_name': 'Acme',
            'lead_first_name': '',
            'lead_last_name': '',
            'lead_job_title': 'VP of Sales',
            'account_domain': '',
            'account_employee_range': '',
            'account_industry': '',
        }]

    def test_skips_blank_lines(self):
        text = HEADER + 'Acme,A,B,CEO,acme.io,11-50,Tech\n\n,,,,,,\nGlobex,C,D,CRO,globex.com,1001-5000,Mfg\n'
        assert [r['account_name'] for r in parse_leads_csv(text)] == ['Acme', 'Globex']

    def test_quoted_commas(self):
        text = HEADER + '"Acme, Inc.",A,B,"VP, Sales",acme.io,"1,001-5,000",Tech\n'
        row = parse_leads_csv(text)[0]
        assert row['account_name'] == 'Acme, Inc.'
        assert row['account_employee_range'] == '1,001-5,000'

    def test_bom_header(self):
        assert parse_leads_csv('\ufeff' + HEADER + 'Acme,A,B,CEO,,,\n')[0]['account_name'] == 'Acme'


class TestImportLeadsCsv:

    def test_inserts_leads(self, db_session):
        count = import_leads_csv(HEADER + 'Acme,Sarah,Chen,CEO,acme.io,11-50,Tech\n')
        assert count == 1
        lead = db_session.query(Lead).one()
        assert lead.lead_job_title == 'CEO'

    def test_more_than_one_chunk(self, db_session):
        rows = ''.join(f'Co{i},F{i},L{i},VP Sales,,51-200,\n' for i in range(INSERT_CHUNK * 2 + 3))
        assert import_leads_csv(HEADER + rows) == INSERT_CHUNK * 2 + 3
        assert db_session.query(Lead).count() == INSERT_CHUNK * 2 + 3

    def test_replaces_leads_runs_and_results(self, db_session, make_lead):
        lead_id = make_lead()
        db_session.add(RankingRun(id='old-run', status='completed'))
        db_session.flush()
        db_session.add(RankingResult(ranking_run_id='old-run', lead_id=lead_id, relevance_score=10,
                                     is_relevant=False))
        db_session.commit()

        import_leads_csv(HEADER + 'Globex,A,B,CRO,,,\n')

        db_session.expire_all()
        assert [l.account_name for l in db_session.query(Lead)] == ['Globex']
        assert db_session.query(RankingRun).count() == 0
        assert db_session.query(RankingResult).count() == 0

    @pytest.mark.parametrize('text', ['', HEADER, '\n\n'])
    def test_empty_rejected(self, db_session, make_lead, text):
        make_lead()
        with pytest.raises(LeadImportError):
            import_leads_csv(text)
        assert db_session.query(Lead).count() == 1

    def test_load_default_csv_missing_file(self, tmp_path):
        with pytest.raises(LeadImportError):
            load_default_csv(str(tmp_path / 'nope.csv'))

    def test_bundled_sample_parses(self):
        assert len(parse_leads_csv(load_default_csv())) > 0


def test_list_leads_ordered_by_company(make_lead):
    make_lead(account_name='Zeta')
    make_lead(account_name='Alpha')
    data = list_leads()
    assert data['count'] == 2
    assert [l['account_name'] for l in data['leads']] == ['Alpha', 'Zeta']


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

@pytest.fixture
def completed_run(db_session, make_lead):
    """Completed run: Acme has 4 relevant + 1 irrelevant, Globex 1 relevant."""
    scores = [('Acme', 95, True, 1), ('Acme', 80, True, 2), ('Acme', 70, True, 3),
              ('Acme', 60, True, 4), ('Acme', 99, False, None), ('Globex', 40, True, 1)]
    db_session.add(RankingRun(id='run-1', status='completed', total_leads=6, processed_leads=6))
    db_session.flush()
    for company, score, relevant, rank in scores:
        lead_id = make_lead(account_name=company, lead_first_name=f'{company}{score}')
        db_session.add(RankingResult(
            ranking_run_id='run-1', lead_id=lead_id, rank=rank, relevance_score=score,
            is_relevant=relevant, reasoning=f'score "{score}", fit', department_fit='good',
            seniority_fit='good',
        ))
    db_session.commit()
    return 'run-1'


class TestExport:

    def test_top_n_relevant_per_company(self, completed_run):
        rows = top_leads_per_company(top_n=3)
        acme = [r['relevance_score'] for r in rows if r['lead']['account_name'] == 'Acme']
        assert acme == [95, 80, 70]
        assert [r['relevance_score'] for r in rows if r['lead']['account_name'] == 'Globex'] == [40]

    def test_csv_layout(self, completed_run):
        text, filename = export_top_leads_csv(run_id=completed_run, top_n=2)
        assert filename == 'top_2_leads_per_company.csv'

        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == EXPORT_HEADERS
        assert len(rows) == 1 + 3
        first = dict(zip(EXPORT_HEADERS, rows[1]))
        assert first['Rank'] == '1'
        assert first['Company'] == 'Acme'
        assert first['Relevance Score'] == '95'
        assert first['Reasoning'] == 'score "95", fit'

    def test_no_completed_run(self):
        with pytest.raises(RunNotFoundError) as exc_info:
            export_top_leads_csv()
        assert 'No completed ranking runs found' in str(exc_info.value)

    def test_unknown_run(self):
        with pytest.raises(RunNotFoundError):
            export_top_leads_csv(run_id='missing')

    def test_bad_top_n(self, completed_run):
        with pytest.raises(RankingInputError, match="top_n"):
            export_top_leads_csv(top_n=0)

    def test_bad_top_n_is_not_an_import_error(self, completed_run):
        with pytest.raises(RankingInputError) as exc:
            top_leads_per_company(top_n=-1)
        assert not isinstance(exc.value, LeadImportError)
        assert exc.value.status_code == 400
