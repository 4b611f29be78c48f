"""Tests for the leads blueprint — /api/seed, /api/leads, /api/export."""
from unittest.mock import patch

from leadrank.models.ranking_result import RankingResult
from leadrank.models.ranking_run import RankingRun

CSV = ('account_name,lead_first_name,lead_last_name,lead_job_title,'
       'account_domain,account_employee_range,account_industry\n'
       'Acme,Sarah,Chen,CEO,acme.io,11-50,Tech\n'
       'Globex,Robert,Hughes,CRO,globex.com,5001-10000,Manufacturing\n')


class TestSeed:

    def test_csv_body(self, client):
        resp = client.post('/api/seed', data=CSV, content_type='text/csv')
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['success'] is True
        assert data['count'] == 2
        assert data['message'] == 'Successfully loaded 2 leads into the database'

    def test_plain_text_body(self, client):
        resp = client.post('/api/seed', data=CSV, content_type='text/plain; charset=utf-8')
        assert resp.get_json()['count'] == 2

    def test_default_file(self, client):
        with patch('leadrank.routes.leads.load_default_csv', return_value=CSV) as mock_load:
            resp = client.post('/api/seed')
        mock_load.assert_called_once()
        assert resp.get_json()['count'] == 2

    def test_empty_csv_400(self, client):
        resp = client.post('/api/seed', data='', content_type='text/csv')
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'No records found in CSV'


def test_list_leads(client):
    client.post('/api/seed', data=CSV, content_type='text/csv')
    data = client.get('/api/leads').get_json()
    assert data['count'] == 2
    assert [l['account_name'] for l in data['leads']] == ['Acme', 'Globex']


class TestExport:

    def test_no_completed_run_404(self, client):
        resp = client.get('/api/export')
        assert resp.status_code == 404
        assert resp.get_json()['error'] == 'No completed ranking runs found'

    def test_csv_download(self, client, db_session, make_lead):
        lead_id = make_lead(account_name='Acme')
        db_session.add(RankingRun(id='run-x', status='completed'))
        db_session.flush()
        db_session.add(RankingResult(ranking_run_id='run-x', lead_id=lead_id, rank=1,
                                     relevance_score=90, is_relevant=True, reasoning='fit',
                                     department_fit='good', seniority_fit='good'))
        db_session.commit()

        resp = client.get('/api/export?top_n=5')
        assert resp.status_code == 200
        assert resp.mimetype == 'text/csv'
        assert 'filename="top_5_leads_per_company.csv"' in resp.headers['Content-Disposition']
        lines = resp.get_data(as_text=True).splitlines()
        assert lines[0].startswith('Rank,Company,First Name')
        assert lines[1].startswith('1,Acme,')

    def test_bad_top_n_400(self, client, db_session):
        db_session.add(RankingRun(id='run-y', status='completed'))
        db_session.commit()
        resp = client.get('/api/export?top_n=0')
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'top_n must be at least 1'
